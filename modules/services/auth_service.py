"""Email/password identity via the Firebase Identity Toolkit REST API."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from config.settings import AppConfig
from modules.utils.errors import ProviderError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 2
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_AUTH_MESSAGE = "Authentication failed. Please try again."

# Keys are the provider error codes with the "auth/" prefix dropped.
AUTH_ERROR_MESSAGES: Dict[str, str] = {
    "user-not-found": "No account found with this email address.",
    "wrong-password": "Incorrect password. Please try again.",
    "invalid-email": "Please enter a valid email address.",
    "user-disabled": "This account has been disabled.",
    "too-many-requests": "Too many failed attempts. Please try again later.",
    "email-already-in-use": "An account with this email already exists.",
    "weak-password": "Password should be at least 6 characters long.",
    "operation-not-allowed": "This sign-in method is not enabled.",
    "invalid-credential": "Invalid email or password. Please check your credentials.",
    "network-request-failed": "Network error. Please check your connection.",
}

# REST error strings mapped to the codes above.
_REST_CODES: Dict[str, str] = {
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_EMAIL": "invalid-email",
    "USER_DISABLED": "user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
    "EMAIL_EXISTS": "email-already-in-use",
    "WEAK_PASSWORD": "weak-password",
    "OPERATION_NOT_ALLOWED": "operation-not-allowed",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
}


@dataclass(frozen=True, slots=True)
class UserSession:
    """The signed-in user as the UI sees it."""

    uid: str
    email: str
    display_name: str = ""


def auth_error_message(code: str) -> str:
    """Friendly message for an identity error code, with or without the auth/ prefix."""
    key = (code or "").removeprefix("auth/")
    return AUTH_ERROR_MESSAGES.get(key, DEFAULT_AUTH_MESSAGE)


def validate_email(email: str) -> str:
    cleaned = (email or "").strip()
    if not cleaned:
        raise ValidationError("Email is required")
    if not EMAIL_PATTERN.match(cleaned):
        raise ValidationError("Please enter a valid email address")
    return cleaned


def validate_sign_in(email: str, password: str) -> str:
    """Check sign-in fields and return the normalised email."""
    cleaned = validate_email(email)
    if not password:
        raise ValidationError("Password is required")
    return cleaned


def validate_sign_up(email: str, password: str, confirm_password: str, username: str) -> str:
    """Check sign-up fields in form order and return the normalised email."""
    name = (username or "").strip()
    if not name:
        raise ValidationError("Please enter a username")
    if len(name) < MIN_USERNAME_LENGTH:
        raise ValidationError("Username must be at least 2 characters long")
    cleaned = validate_email(email)
    if not password:
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters long")
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    return cleaned


class IdentityClient:
    """Sign users in and up against the Identity Toolkit endpoints."""

    def __init__(self, config: AppConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.session = session or requests.Session()

    def sign_in(self, email: str, password: str) -> UserSession:
        cleaned = validate_sign_in(email, password)
        return self._call("accounts:signInWithPassword", {"email": cleaned, "password": password})

    def sign_up(self, email: str, password: str, confirm_password: str, username: str) -> UserSession:
        cleaned = validate_sign_up(email, password, confirm_password, username)
        body = {"email": cleaned, "password": password, "displayName": username.strip()}
        return self._call("accounts:signUp", body)

    def _call(self, action: str, body: Dict[str, Any]) -> UserSession:
        if not self.config.firebase_api_key:
            raise ProviderError("Sign-in is not configured. Set FIREBASE_API_KEY.")

        url = f"{self.config.identity_url}/{action}"
        logger.info("Identity request %s for %s", action, body["email"])
        try:
            response = self.session.post(
                url,
                params={"key": self.config.firebase_api_key},
                json={**body, "returnSecureToken": True},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(auth_error_message("network-request-failed")) from exc

        try:
            payload: Any = response.json()
        except ValueError:
            payload = {}

        if not response.ok:
            raise ProviderError(_message_from_payload(payload), status_code=response.status_code)

        uid = payload.get("localId")
        if not uid:
            raise ProviderError(DEFAULT_AUTH_MESSAGE)
        return UserSession(
            uid=uid,
            email=payload.get("email") or body["email"],
            display_name=payload.get("displayName") or body.get("displayName", ""),
        )


def _message_from_payload(payload: Any) -> str:
    error = payload.get("error") if isinstance(payload, dict) else None
    raw = error.get("message", "") if isinstance(error, dict) else ""
    # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters".
    code = raw.split(":", 1)[0].strip()
    return auth_error_message(_REST_CODES.get(code, ""))
