"""Editing helpers for the code tab: templates, file load/save and formatting."""

from __future__ import annotations

import ast
import json
import re
from dataclasses import dataclass

from modules.pipelines.pdf_tools import NamedFile
from modules.prompts.templates import extension_for, language_for_filename, template_for
from modules.utils.errors import ProcessingError, ValidationError

DEFAULT_BASENAME = "main"

_EXTENSION = re.compile(r"\.[^/.]+$")


@dataclass(frozen=True, slots=True)
class SourceFile:
    """What the editor shows: the code, its file name and language."""

    code: str
    filename: str
    language: str


def rename_for_language(filename: str, language: str) -> str:
    """Swap the extension of ``filename`` for the one ``language`` uses."""
    base = _EXTENSION.sub("", (filename or "").strip()) or DEFAULT_BASENAME
    return base + extension_for(language)


def switch_language(language: str, filename: str) -> SourceFile:
    """Reset the editor to ``language``'s starter template."""
    return SourceFile(
        code=template_for(language),
        filename=rename_for_language(filename, language),
        language=language,
    )


def load_source(source: NamedFile, current_language: str) -> SourceFile:
    """Open an uploaded file; the language follows its extension when known."""
    try:
        code = source.data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProcessingError(f"{source.name} is not a UTF-8 text file.") from exc
    language = language_for_filename(source.name) or current_language
    return SourceFile(code=code, filename=source.name, language=language)


def save_source(code: str, filename: str, language: str) -> NamedFile:
    name = (filename or "").strip() or rename_for_language("", language)
    return NamedFile(name, (code or "").encode("utf-8"))


def format_code(code: str, language: str) -> str:
    """Pretty-print JSON; apply a line-break pass to HTML, JavaScript and TypeScript."""
    if language == "json":
        try:
            parsed = json.loads(code)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON: {exc}") from exc
        return json.dumps(parsed, indent=2, ensure_ascii=False)
    if language in ("javascript", "typescript"):
        formatted = re.sub(r";(?!\s*$)", ";\n", code)
        formatted = re.sub(r"\{(?!\s*$)", "{\n", formatted)
        formatted = re.sub(r"\}(?!\s*$)", "\n}\n", formatted)
        formatted = re.sub(r",(?!\s*$)", ",\n", formatted)
        return _tidy_lines(formatted)
    if language == "html":
        return _tidy_lines(code.replace("><", ">\n<"))
    raise ValidationError("Auto-formatting not available for this language")


def check_syntax(code: str, language: str) -> str:
    """Parse JSON or Python without running it and describe the result."""
    if language == "json":
        try:
            parsed = json.loads(code)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON: {exc}") from exc
        kind = "object" if isinstance(parsed, dict) else type(parsed).__name__
        return f"Valid JSON format ({kind})."
    if language == "python":
        try:
            ast.parse(code)
        except SyntaxError as exc:
            raise ValidationError(f"Python syntax error on line {exc.lineno}: {exc.msg}") from exc
        return "Python syntax is valid."
    return f"No syntax check for {language}. Save the file and run it with a {language} toolchain."


def _tidy_lines(text: str) -> str:
    return "\n".join(line.strip() for line in text.split("\n") if line.strip())
