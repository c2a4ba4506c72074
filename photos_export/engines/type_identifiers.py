"""Canonical type identifier <-> filename extension mapping.

Type identifiers are the library's MIME-like names for resource formats
(``public.jpeg``, ``com.apple.quicktime-movie``). Plain MIME types
(``image/jpeg``) are accepted too and resolved through ``mimetypes``.
"""
from __future__ import annotations

import mimetypes
from typing import Optional

# Preferred extension per identifier (first extension wins on reverse lookup).
TYPE_IDENTIFIER_EXTENSIONS: dict[str, str] = {
    "public.jpeg": "jpeg",
    "public.png": "png",
    "public.heic": "heic",
    "public.heif": "heif",
    "public.tiff": "tiff",
    "com.compuserve.gif": "gif",
    "com.microsoft.bmp": "bmp",
    "org.webmproject.webp": "webp",
    "com.adobe.raw-image": "dng",
    "com.canon.cr2-raw-image": "cr2",
    "com.canon.cr3-raw-image": "cr3",
    "com.nikon.raw-image": "nef",
    "com.sony.arw-raw-image": "arw",
    "com.apple.quicktime-movie": "mov",
    "public.mpeg-4": "mp4",
    "com.apple.m4v-video": "m4v",
    "public.avi": "avi",
    "public.mpeg-4-audio": "m4a",
    "public.mp3": "mp3",
    "com.microsoft.waveform-audio": "wav",
    "com.apple.coreaudio-format": "caf",
    "com.apple.photos.apple-adjustment-envelope": "plist",
    "com.apple.property-list": "plist",
    "com.apple.private.photos.aae": "aae",
}

# Extensions that map to an identifier but are not its preferred extension.
EXTENSION_ALIASES: dict[str, str] = {
    "jpg": "public.jpeg",
    "jpe": "public.jpeg",
    "tif": "public.tiff",
    "qt": "com.apple.quicktime-movie",
}

_EXTENSION_TO_IDENTIFIER: dict[str, str] = {}
for _identifier, _ext in TYPE_IDENTIFIER_EXTENSIONS.items():
    _EXTENSION_TO_IDENTIFIER.setdefault(_ext, _identifier)
_EXTENSION_TO_IDENTIFIER.update(EXTENSION_ALIASES)

IMAGE_EXTENSIONS = {
    "jpg", "jpeg", "jpe", "png", "heic", "heif", "tif", "tiff", "gif",
    "bmp", "webp", "dng", "cr2", "cr3", "nef", "arw",
}
VIDEO_EXTENSIONS = {"mov", "qt", "mp4", "m4v", "avi"}
AUDIO_EXTENSIONS = {"m4a", "mp3", "wav", "caf"}
ADJUSTMENT_EXTENSIONS = {"aae", "plist"}


def preferred_extension(type_identifier: str) -> Optional[str]:
    """Preferred lowercase extension (no dot) for a type identifier, if known."""
    if not type_identifier:
        return None
    key = type_identifier.strip().lower()
    ext = TYPE_IDENTIFIER_EXTENSIONS.get(key)
    if ext:
        return ext
    if "/" in key:
        guessed = mimetypes.guess_extension(key, strict=False)
        if guessed:
            return guessed.lstrip(".").lower()
    return None


def identifier_for_extension(extension: str) -> str:
    """Type identifier for an extension, falling back to ``public.data``."""
    ext = extension.lstrip(".").lower()
    identifier = _EXTENSION_TO_IDENTIFIER.get(ext)
    if identifier:
        return identifier
    mime, _ = mimetypes.guess_type(f"file.{ext}", strict=False)
    return mime or "public.data"
