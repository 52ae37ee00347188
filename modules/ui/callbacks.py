"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.settings import AppConfig
from modules.pipelines import code_editor, documents, pdf_tools
from modules.pipelines.image_editor import EditSettings, ImageEditorSession
from modules.pipelines.img2img import Image2ImageService, ImageEditRequest
from modules.pipelines.pdf_tools import BatchResult, NamedFile
from modules.pipelines.text2img import PromptRequest, Text2ImageService
from modules.pipelines.textgen import (
    CodeGenerationService,
    CodeRequest,
    MusicGenerationService,
    MusicRequest,
    TextGenerationService,
    TextRequest,
)
from modules.pipelines.video import VideoRequest, VideoService
from modules.services.api_keys import ApiKeyStore
from modules.services.auth_service import IdentityClient, UserSession
from modules.services.history_service import GenerationHistoryService, GenerationRecord
from modules.services.storage_service import StorageService
from modules.utils.errors import ProcessingError, ValidationError

logger = logging.getLogger(__name__)

SIGN_IN_REQUIRED = "Please sign in to use this feature"
NO_IMAGE = "Please upload an image first"


def build_callbacks(
    config: AppConfig,
    auth: Optional[IdentityClient] = None,
    api_keys: Optional[ApiKeyStore] = None,
    history: Optional[GenerationHistoryService] = None,
    storage: Optional[StorageService] = None,
    text2img: Optional[Text2ImageService] = None,
    video: Optional[VideoService] = None,
    image2img: Optional[Image2ImageService] = None,
    text: Optional[TextGenerationService] = None,
    code: Optional[CodeGenerationService] = None,
    music: Optional[MusicGenerationService] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions.

    Every callback returns its outputs followed by a status message; errors
    are logged and reported through that message instead of being raised.
    """

    key_store = api_keys or ApiKeyStore(config.api_keys_path)
    history_store = history or GenerationHistoryService(config.history_path)
    files = storage or StorageService(config.output_dir)

    def _require(service: Any, label: str) -> Any:
        if service is None:
            raise RuntimeError(f"{label} service is not configured")
        return service

    def _require_user(session: Optional[UserSession]) -> UserSession:
        if session is None:
            raise ValidationError(SIGN_IN_REQUIRED)
        return session

    def _resolve_key(session: Optional[UserSession], service: str, typed: str) -> str:
        """Prefer the key typed into the tool, then the one saved for the user."""
        cleaned = (typed or "").strip()
        if cleaned or session is None:
            return cleaned
        return key_store.get(session.uid, service) or ""

    def _failure(action: str, exc: Exception) -> str:
        if isinstance(exc, ValidationError):
            logger.warning("%s rejected: %s", action, exc)
        else:
            logger.exception("%s failed", action)
        return f"{action} failed: {exc}"

    def _uploads(uploaded: Any) -> List[NamedFile]:
        if not uploaded:
            return []
        items = uploaded if isinstance(uploaded, (list, tuple)) else [uploaded]
        # Gradio hands over file paths, or tempfile wrappers with a .name.
        return [NamedFile.from_path(getattr(item, "name", item)) for item in items]

    def _batch_status(action: str, result: BatchResult) -> str:
        lines = [f"{action}: {len(result.files)} file(s) ready."]
        lines.extend(result.notes)
        lines.extend(f"Error: {error}" for error in result.errors)
        return "\n".join(lines)

    def _rows(records: Sequence[GenerationRecord]) -> List[List[Any]]:
        rows = []
        for record in records:
            stamp = datetime.fromtimestamp(record.created_at).strftime("%Y-%m-%d %H:%M")
            rows.append([stamp, record.prompt, record.result_url, record.seed])
        return rows

    def _history_rows(session: Optional[UserSession], kind: str) -> List[List[Any]]:
        if session is None:
            return []
        try:
            return _rows(history_store.list(session.uid, kind=kind))
        except ProcessingError as exc:
            logger.warning("History unavailable: %s", exc)
            return []

    # Account

    def on_sign_in(email: str, password: str) -> tuple[Optional[UserSession], str]:
        try:
            session = _require(auth, "Sign-in").sign_in(email, password)
        except Exception as exc:  # noqa: BLE001
            return None, _failure("Sign in", exc)
        logger.info("User %s signed in", session.uid)
        return session, f"Signed in as {session.email}"

    def on_sign_up(
        email: str, password: str, confirm_password: str, username: str
    ) -> tuple[Optional[UserSession], str]:
        try:
            session = _require(auth, "Sign-in").sign_up(email, password, confirm_password, username)
        except Exception as exc:  # noqa: BLE001
            return None, _failure("Sign up", exc)
        logger.info("User %s signed up", session.uid)
        return session, f"Account created. Welcome {session.display_name or session.email}!"

    def on_sign_out(session: Optional[UserSession]) -> tuple[None, str]:
        if session is not None:
            logger.info("User %s signed out", session.uid)
        return None, "Signed out."

    def on_save_api_keys(
        session: Optional[UserSession], runware: str, huggingface: str, removebg: str
    ) -> str:
        try:
            user = _require_user(session)
            key_store.save_many(
                user.uid,
                {"runware": runware, "huggingface": huggingface, "removebg": removebg},
            )
        except Exception as exc:  # noqa: BLE001
            return _failure("Saving API keys", exc)
        return "API keys saved."

    def on_load_api_keys(session: Optional[UserSession]) -> tuple[str, str, str, str]:
        try:
            keys = key_store.get_all(_require_user(session).uid)
        except Exception as exc:  # noqa: BLE001
            return "", "", "", _failure("Loading API keys", exc)
        return (
            keys.get("runware", ""),
            keys.get("huggingface", ""),
            keys.get("removebg", ""),
            f"Loaded {len(keys)} saved key(s).",
        )

    # Image and video generation

    def on_generate_image(
        session: Optional[UserSession], prompt: str, api_key: str
    ) -> tuple[Optional[str], List[List[Any]], str]:
        try:
            user = _require_user(session)
            service = _require(text2img, "Image generation")
            result = service.generate(
                PromptRequest(prompt=prompt, api_key=_resolve_key(user, "runware", api_key))
            )
        except Exception as exc:  # noqa: BLE001
            return None, _history_rows(session, "image"), _failure("Image generation", exc)

        try:
            history_store.record(
                GenerationRecord(
                    user_id=user.uid,
                    prompt=result.prompt,
                    result_url=result.image_url,
                    kind="image",
                    seed=result.seed,
                )
            )
            info = "Image generated successfully!"
        except (OSError, ProcessingError) as exc:
            logger.warning("History not saved: %s", exc)
            info = "Image generated, but it could not be saved to history."
        if result.seed is not None:
            info += f" (seed={result.seed})"
        return result.image_url, _history_rows(user, "image"), info

    def on_generate_video(
        session: Optional[UserSession], prompt: str, api_key: str
    ) -> tuple[Optional[str], List[List[Any]], str]:
        try:
            user = _require_user(session)
            service = _require(video, "Video generation")
            result = service.generate(
                VideoRequest(prompt=prompt, api_key=_resolve_key(user, "runware", api_key))
            )
        except Exception as exc:  # noqa: BLE001
            return None, _history_rows(session, "video"), _failure("Video generation", exc)

        try:
            history_store.record(
                GenerationRecord(
                    user_id=user.uid,
                    prompt=result.prompt,
                    result_url=result.video_url,
                    kind="video",
                )
            )
            info = "Video generated successfully!"
        except (OSError, ProcessingError) as exc:
            logger.warning("History not saved: %s", exc)
            info = "Video generated, but it could not be saved to history."
        return result.video_url, _history_rows(user, "video"), info

    def on_refresh_history(session: Optional[UserSession], kind: str) -> tuple[List[List[Any]], str]:
        try:
            rows = _rows(history_store.list(_require_user(session).uid, kind=kind))
        except Exception as exc:  # noqa: BLE001
            return [], _failure("Loading history", exc)
        return rows, f"{len(rows)} item(s) in history."

    # Image editor

    def _preview(editor: ImageEditorSession) -> Any:
        return editor.current.to_image()

    def on_editor_upload(
        session: Optional[UserSession], image: Any
    ) -> tuple[Optional[ImageEditorSession], Any, str]:
        try:
            _require_user(session)
            editor = ImageEditorSession.from_upload(image)
        except Exception as exc:  # noqa: BLE001
            return None, None, _failure("Loading image", exc)
        width, height = editor.original.size
        return editor, _preview(editor), f"Image loaded ({width}x{height})."

    def on_editor_adjust(
        editor: Optional[ImageEditorSession],
        brightness: float,
        contrast: float,
        saturation: float,
        blur: float,
        rotation: float,
        flip_horizontal: bool,
        flip_vertical: bool,
    ) -> tuple[Optional[ImageEditorSession], Any, str]:
        if editor is None:
            return None, None, NO_IMAGE
        settings = EditSettings(
            brightness=float(brightness),
            contrast=float(contrast),
            saturation=float(saturation),
            blur=float(blur),
            rotation=float(rotation),
            flip_horizontal=bool(flip_horizontal),
            flip_vertical=bool(flip_vertical),
        )
        try:
            updated = editor.with_settings(settings)
        except Exception as exc:  # noqa: BLE001
            return editor, _preview(editor), _failure("Adjustment", exc)
        return updated, _preview(updated), "Adjustments applied."

    def on_editor_rotate(
        editor: Optional[ImageEditorSession], degrees: float
    ) -> tuple[Optional[ImageEditorSession], Any, float, str]:
        if editor is None:
            return None, None, 0, NO_IMAGE
        try:
            updated = editor.rotate_by(float(degrees))
        except Exception as exc:  # noqa: BLE001
            return editor, _preview(editor), editor.settings.rotation, _failure("Rotation", exc)
        return updated, _preview(updated), updated.settings.rotation, "Image rotated."

    def on_editor_effect(
        editor: Optional[ImageEditorSession], effect: str
    ) -> tuple[Optional[ImageEditorSession], Any, str]:
        if editor is None:
            return None, None, NO_IMAGE
        try:
            updated = editor.apply_effect(effect)
        except Exception as exc:  # noqa: BLE001
            return editor, _preview(editor), _failure("Effect", exc)
        return updated, _preview(updated), f"{effect.replace('_', ' ').capitalize()} applied."

    def on_editor_ai(
        session: Optional[UserSession],
        editor: Optional[ImageEditorSession],
        edit_type: str,
        api_key: str,
    ) -> tuple[Optional[ImageEditorSession], Any, str]:
        if editor is None:
            return None, None, NO_IMAGE
        service_name = "removebg" if edit_type == "background-removal" else "huggingface"
        try:
            user = _require_user(session)
            service = _require(image2img, "AI image editing")
            buffer = service.edit(
                ImageEditRequest(
                    image=editor.current,
                    api_key=_resolve_key(user, service_name, api_key),
                    edit_type=edit_type,
                )
            )
        except Exception as exc:  # noqa: BLE001
            return editor, _preview(editor), _failure("AI processing", exc)
        updated = editor.with_current(buffer)
        return updated, _preview(updated), "AI processing completed!"

    def on_editor_reset(editor: Optional[ImageEditorSession]) -> tuple[Any, ...]:
        defaults = EditSettings()
        controls = (
            defaults.brightness,
            defaults.contrast,
            defaults.saturation,
            defaults.blur,
            defaults.rotation,
            defaults.flip_horizontal,
            defaults.flip_vertical,
        )
        if editor is None:
            return (None, None, *controls, NO_IMAGE)
        updated = editor.reset()
        return (updated, _preview(updated), *controls, "Image reset to original.")

    def on_editor_export(
        editor: Optional[ImageEditorSession], flatten: bool
    ) -> tuple[Optional[str], str]:
        if editor is None:
            return None, NO_IMAGE
        try:
            stamp = int(datetime.now().timestamp() * 1000)
            path = files.save_file(
                NamedFile(f"edited-image-{stamp}.png", editor.export_png(flatten=bool(flatten)))
            )
        except Exception as exc:  # noqa: BLE001
            return None, _failure("Export", exc)
        return str(path), "Image exported."

    # Code

    def on_generate_code(
        session: Optional[UserSession], prompt: str, language: str, framework: str, api_key: str
    ) -> tuple[str, Optional[str], str]:
        try:
            user = _require_user(session)
            service = _require(code, "Code generation")
            result = service.generate(
                CodeRequest(
                    prompt=prompt,
                    api_key=_resolve_key(user, "runware", api_key),
                    language=language,
                    framework=framework or None,
                )
            )
            path = files.save_file(NamedFile(result.filename, result.code.encode("utf-8")))
        except Exception as exc:  # noqa: BLE001
            return "", None, _failure("Code generation", exc)
        return result.code, str(path), f"Code generated! Saved as {result.filename}"

    def on_code_language(
        session: Optional[UserSession], language: str, current_code: str, filename: str
    ) -> tuple[str, str, str]:
        try:
            _require_user(session)
            source = code_editor.switch_language(language, filename)
        except Exception as exc:  # noqa: BLE001
            return current_code, filename, _failure("Switching language", exc)
        return source.code, source.filename, f"Switched to {language}"

    def on_code_load(
        session: Optional[UserSession], upload: Any, current_code: str, filename: str, language: str
    ) -> tuple[str, str, str, str]:
        try:
            _require_user(session)
            sources = _uploads(upload)
            if not sources:
                raise ValidationError("Please select a file to load")
            source = code_editor.load_source(sources[0], language)
        except Exception as exc:  # noqa: BLE001
            return current_code, filename, language, _failure("Loading file", exc)
        return source.code, source.filename, source.language, "File loaded successfully!"

    def on_code_save(
        session: Optional[UserSession], current_code: str, filename: str, language: str
    ) -> tuple[Optional[str], str]:
        try:
            _require_user(session)
            path = files.save_file(code_editor.save_source(current_code, filename, language))
        except Exception as exc:  # noqa: BLE001
            return None, _failure("Saving file", exc)
        return str(path), f"File saved as {path.name}"

    def on_code_format(
        session: Optional[UserSession], current_code: str, language: str
    ) -> tuple[str, str]:
        try:
            _require_user(session)
            formatted = code_editor.format_code(current_code or "", language)
        except Exception as exc:  # noqa: BLE001
            return current_code, _failure("Formatting", exc)
        return formatted, "Code formatted!"

    def on_code_check(session: Optional[UserSession], current_code: str, language: str) -> str:
        try:
            _require_user(session)
            return code_editor.check_syntax(current_code or "", language)
        except Exception as exc:  # noqa: BLE001
            return _failure("Syntax check", exc)

    # Document editor

    def on_doc_select(content: str, evt: Any) -> Tuple[int, int]:
        """Store the textbox selection as (start, end)."""
        index = getattr(evt, "index", None)
        if isinstance(index, (list, tuple)) and len(index) == 2:
            return int(index[0]), int(index[1])
        return len(content or ""), len(content or "")

    def on_doc_format(
        session: Optional[UserSession], content: str, selection: Sequence[int], fmt: str
    ) -> tuple[str, str]:
        try:
            _require_user(session)
            start, end = selection or (0, 0)
            updated = documents.apply_formatting(content or "", int(start), int(end), fmt)
        except Exception as exc:  # noqa: BLE001
            return content, _failure("Formatting", exc)
        return updated, f"{fmt.capitalize()} applied."

    def on_doc_insert_list(
        session: Optional[UserSession], content: str, selection: Sequence[int], ordered: bool
    ) -> tuple[str, str]:
        try:
            _require_user(session)
            position = selection[1] if selection else len(content or "")
            updated = documents.insert_list(content or "", int(position), ordered=bool(ordered))
        except Exception as exc:  # noqa: BLE001
            return content, _failure("Insert list", exc)
        return updated, "List item inserted."

    def on_doc_load(session: Optional[UserSession], upload: Any) -> tuple[str, str, str]:
        try:
            _require_user(session)
            sources = _uploads(upload)
            if not sources:
                raise ValidationError("Please select a file to load")
            document = documents.load_document(sources[0])
        except Exception as exc:  # noqa: BLE001
            return "", "", _failure("Loading document", exc)
        return document.title, document.content, "Document loaded successfully!"

    def on_doc_export(
        session: Optional[UserSession],
        title: str,
        content: str,
        font_family: str,
        font_size: float,
        text_align: str,
        target: str,
    ) -> tuple[Optional[str], str]:
        exporters = {
            "txt": documents.export_text,
            "pdf": documents.export_pdf,
            "doc": documents.export_word,
        }
        try:
            _require_user(session)
            exporter = exporters.get(target)
            if exporter is None:
                raise ValidationError(f"Unknown export format '{target}'.")
            document = documents.Document(
                title=title or "Untitled Document",
                content=content or "",
                font_family=font_family or "Arial",
                font_size=int(font_size),
                text_align=text_align or "left",
            )
            path = files.save_file(exporter(document))
        except Exception as exc:  # noqa: BLE001
            return None, _failure("Export", exc)
        return str(path), f"Document exported as {path.name}"

    # PDF tools

    def _run_batch(
        session: Optional[UserSession], action: str, operation: Any
    ) -> tuple[List[str], str]:
        try:
            _require_user(session)
            result = operation()
            paths = files.save_files(result.files) if result.files else []
        except Exception as exc:  # noqa: BLE001
            return [], _failure(action, exc)
        return [str(path) for path in paths], _batch_status(action, result)

    def _require_uploads(upload: Any) -> List[NamedFile]:
        sources = _uploads(upload)
        if not sources:
            raise ValidationError("Please select files to process")
        return sources

    def on_pdf_split(session: Optional[UserSession], upload: Any, page_range: str) -> tuple[List[str], str]:
        return _run_batch(session, "Split", lambda: pdf_tools.split_pdfs(_require_uploads(upload), page_range))

    def on_pdf_merge(session: Optional[UserSession], upload: Any) -> tuple[List[str], str]:
        return _run_batch(
            session,
            "Merge",
            lambda: BatchResult(files=[pdf_tools.merge_pdfs(_uploads(upload))]),
        )

    def on_pdf_rotate(session: Optional[UserSession], upload: Any, angle: Any) -> tuple[List[str], str]:
        return _run_batch(session, "Rotate", lambda: pdf_tools.rotate_pdfs(_require_uploads(upload), angle))

    def on_pdf_compress(session: Optional[UserSession], upload: Any) -> tuple[List[str], str]:
        return _run_batch(session, "Compress", lambda: pdf_tools.compress_pdfs(_require_uploads(upload)))

    def on_pdf_to_images(session: Optional[UserSession], upload: Any) -> tuple[List[str], str]:
        def convert() -> BatchResult:
            combined = BatchResult()
            for source in _require_uploads(upload):
                try:
                    result = pdf_tools.pdf_to_images(source)
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Conversion of %s failed: %s", source.name, exc)
                    combined.errors.append(f"{source.name}: {exc}")
                    continue
                combined.files.extend(result.files)
                combined.errors.extend(result.errors)
            return combined

        return _run_batch(session, "PDF to images", convert)

    def on_images_to_pdf(session: Optional[UserSession], upload: Any) -> tuple[List[str], str]:
        return _run_batch(
            session,
            "Images to PDF",
            lambda: BatchResult(files=[pdf_tools.images_to_pdf(_require_uploads(upload))]),
        )

    # Text and music need no account, only a Hugging Face key.

    def on_generate_text(
        prompt: str, text_type: str, tone: str, length: str, api_key: str
    ) -> tuple[str, str]:
        try:
            service = _require(text, "Text generation")
            result = service.generate(
                TextRequest(prompt=prompt, api_key=api_key, text_type=text_type, tone=tone, length=length)
            )
        except Exception as exc:  # noqa: BLE001
            return "", _failure("Text generation", exc)
        return result, "Text generated successfully!"

    def on_generate_music(
        prompt: str, genre: str, duration: float, api_key: str
    ) -> tuple[Optional[str], str]:
        try:
            service = _require(music, "Music generation")
            audio = service.generate(
                MusicRequest(prompt=prompt, api_key=api_key, genre=genre, duration=int(duration))
            )
            stamp = int(datetime.now().timestamp() * 1000)
            path = files.save_file(NamedFile(f"generated-music-{stamp}.wav", audio))
        except Exception as exc:  # noqa: BLE001
            return None, _failure("Music generation", exc)
        return str(path), "Music generated successfully!"

    callbacks: Dict[str, Any] = {
        "on_sign_in": on_sign_in,
        "on_sign_up": on_sign_up,
        "on_sign_out": on_sign_out,
        "on_save_api_keys": on_save_api_keys,
        "on_load_api_keys": on_load_api_keys,
        "on_generate_image": on_generate_image,
        "on_generate_video": on_generate_video,
        "on_refresh_history": on_refresh_history,
        "on_editor_upload": on_editor_upload,
        "on_editor_adjust": on_editor_adjust,
        "on_editor_rotate": on_editor_rotate,
        "on_editor_effect": on_editor_effect,
        "on_editor_ai": on_editor_ai,
        "on_editor_reset": on_editor_reset,
        "on_editor_export": on_editor_export,
        "on_generate_code": on_generate_code,
        "on_code_language": on_code_language,
        "on_code_load": on_code_load,
        "on_code_save": on_code_save,
        "on_code_format": on_code_format,
        "on_code_check": on_code_check,
        "on_doc_select": on_doc_select,
        "on_doc_format": on_doc_format,
        "on_doc_insert_list": on_doc_insert_list,
        "on_doc_load": on_doc_load,
        "on_doc_export": on_doc_export,
        "on_pdf_split": on_pdf_split,
        "on_pdf_merge": on_pdf_merge,
        "on_pdf_rotate": on_pdf_rotate,
        "on_pdf_compress": on_pdf_compress,
        "on_pdf_to_images": on_pdf_to_images,
        "on_images_to_pdf": on_images_to_pdf,
        "on_generate_text": on_generate_text,
        "on_generate_music": on_generate_music,
    }
    return callbacks
