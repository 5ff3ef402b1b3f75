"""Checking and storing uploaded event images."""

from __future__ import annotations

import time
import uuid
from pathlib import Path

MAX_IMAGE_SIZE = 10 * 1024 * 1024
SNIFF_LENGTH = 512
DEFAULT_UPLOAD_DIR = "uploads/events"
URL_PREFIX = "/uploads/events/"

_UPLOAD_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")
_RASTER_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
_ALLOWED_MIME = ("image/jpeg", "image/png", "image/gif", "image/webp")

_JPEG_MAGIC = b"\xff\xd8\xff"
_PNG_MAGIC = b"\x89PNG"
_GIF_MAGIC = b"GIF8"
_RIFF_MAGIC = b"RIFF"

_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1", b"<DIV",
    b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B", b"<BODY", b"<BR", b"<P",
    b"<!--",
)
_BINARY_BYTES = frozenset(
    [*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)]
)
_WHITESPACE = b"\t\n\x0c\r "


class ImageError(Exception):
    """The uploaded file cannot be used as an event image."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _is_html(data: bytes) -> bool:
    upper = data.upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag) and len(data) > len(tag) and data[len(tag)] in b" >":
            return True
    return False


def detect_mime(head: bytes) -> str:
    """Guess the content type of data from its first bytes."""
    head = head[:SNIFF_LENGTH]
    if head.startswith(_JPEG_MAGIC):
        return "image/jpeg"
    if head.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if head.startswith(b"GIF87a") or head.startswith(b"GIF89a"):
        return "image/gif"
    if len(head) >= 14 and head.startswith(_RIFF_MAGIC) and head[8:14] == b"WEBPVP":
        return "image/webp"
    if head.startswith(b"BM"):
        return "image/bmp"
    if head.startswith(b"\x00\x00\x01\x00"):
        return "image/x-icon"
    if head.startswith(b"%PDF-"):
        return "application/pdf"

    text = head.lstrip(_WHITESPACE)
    if _is_html(text):
        return "text/html; charset=utf-8"
    if text.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    if any(byte in _BINARY_BYTES for byte in head):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def is_valid_image(head: bytes, ext: str) -> bool:
    """True when the leading bytes are an image that matches the extension."""
    ext = ext.lower()
    if ext == ".svg":
        start = head[:100].decode("utf-8", errors="replace").lower()
        return "<svg" in start or "<?xml" in start

    mime = detect_mime(head)
    if not mime.startswith(_ALLOWED_MIME):
        return False
    if ext not in _RASTER_EXTENSIONS or len(head) < 4:
        return False

    if head.startswith(_JPEG_MAGIC):
        return ext in (".jpg", ".jpeg")
    if head.startswith(_PNG_MAGIC):
        return ext == ".png"
    if head.startswith(_GIF_MAGIC):
        return ext == ".gif"
    if head.startswith(_RIFF_MAGIC) and len(head) >= 12 and head[8:12] == b"WEBP":
        return ext == ".webp"
    return False


def _extension(filename: str) -> str:
    name = filename.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def save_event_image(
    filename: str, data: bytes, upload_dir: str | Path = DEFAULT_UPLOAD_DIR
) -> str:
    """Validate an uploaded image, store it and return its public URL."""
    if not data:
        raise ImageError("файл пустой")
    if len(data) > MAX_IMAGE_SIZE:
        raise ImageError("размер файла не должен превышать 10MB")

    ext = _extension(filename) or ".jpg"
    if ext not in _UPLOAD_EXTENSIONS:
        raise ImageError(
            "недопустимый формат файла. Разрешены: jpg, jpeg, png, gif, webp, svg"
        )

    head = data[:SNIFF_LENGTH].ljust(SNIFF_LENGTH, b"\x00")
    if not is_valid_image(head, ext):
        raise ImageError(
            "недопустимый тип файла. Файл должен быть изображением (JPEG, PNG, GIF, WebP, SVG)"
        )

    directory = Path(upload_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ImageError(f"ошибка при создании директории: {exc}") from exc

    stored_name = f"{uuid.uuid4()}_{int(time.time())}{ext}"
    target = directory / stored_name
    try:
        target.write_bytes(data)
    except OSError as exc:
        target.unlink(missing_ok=True)
        raise ImageError(f"ошибка при сохранении файла: {exc}") from exc

    return URL_PREFIX + stored_name