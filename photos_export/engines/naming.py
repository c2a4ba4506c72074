"""Deterministic, collision-free export filenames.

An exported file is named after its capture time in local time
(``YYYYMMDDHHMMSS``). The first resource claiming a stamp gets the bare
stamp; later claimants get one extra lowercase letter derived from an
FNV-1a hash of the resource's name and metadata, advancing through the
alphabet (and then through re-hashed, prefixed cycles) until an unused
name is found.

Only names claimed in ``used_names`` are considered; nothing here touches
the filesystem.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import PurePosixPath
from typing import MutableSet, Optional

from ..core.models import Asset, Resource
from .type_identifiers import preferred_extension

FNV_OFFSET_BASIS = 14695981039346656037
FNV_PRIME = 1099511628211
_MASK_64 = 0xFFFFFFFFFFFFFFFF

ALPHABET_SIZE = 26


def fnv1a64(value: str) -> int:
    """64-bit FNV-1a over the UTF-8 bytes of ``value``.

    Stable across processes and interpreter runs, unlike ``hash()``.
    Surrogate-escaped characters (undecodable filename bytes) hash as the
    original bytes.
    """
    h = FNV_OFFSET_BASIS
    for byte in value.encode("utf-8", "surrogateescape"):
        h ^= byte
        h = (h * FNV_PRIME) & _MASK_64
    return h


def alpha_letter(hash_value: int, offset: int = 0) -> str:
    """Map a hash (plus offset) to a letter ``a``..``z``."""
    idx = (hash_value % ALPHABET_SIZE + offset % ALPHABET_SIZE) % ALPHABET_SIZE
    return chr(ord("a") + idx)


def cycle_prefix(cycle: int) -> str:
    """Bijective base-26 letters for a cycle number: 1 -> a, 26 -> z, 27 -> aa."""
    letters = []
    while cycle > 0:
        cycle, rem = divmod(cycle - 1, ALPHABET_SIZE)
        letters.append(chr(ord("a") + rem))
    return "".join(reversed(letters))


def to_local(moment: datetime) -> datetime:
    """Express ``moment`` in the local timezone.

    Naive datetimes are taken to already be local wall-clock time.
    """
    return moment.astimezone()


def capture_timestamp(moment: datetime) -> str:
    """Format a capture time as a 14-digit local stamp ``YYYYMMDDHHMMSS``."""
    local = to_local(moment)
    return (
        f"{local.year:04d}{local.month:02d}{local.day:02d}"
        f"{local.hour:02d}{local.minute:02d}{local.second:02d}"
    )


def resolve_extension(original_filename: str, type_identifier: str) -> str:
    """Lowercase extension without the dot, or "" if none can be derived."""
    suffix = PurePosixPath(original_filename).suffix if original_filename else ""
    ext: Optional[str] = suffix[1:] if len(suffix) > 1 else None
    if not ext:
        ext = preferred_extension(type_identifier)
    return (ext or "").lower()


def collision_seed(original_filename: str, fallback_seed: str) -> str:
    if original_filename:
        return f"{original_filename}|{fallback_seed}"
    return fallback_seed


def export_filename(
    capture_time: datetime,
    original_filename: str,
    fallback_seed: str,
    type_identifier: str,
    used_names: MutableSet[str],
) -> str:
    """Pick an unused export filename and claim it in ``used_names``.

    Args:
        capture_time: When the asset was captured.
        original_filename: The resource's original name, may be empty.
        fallback_seed: Stable metadata identifying the resource.
        type_identifier: Resource type identifier, used for the extension
            when the original name has none.
        used_names: Names already claimed; the chosen name is added.

    Returns:
        ``<stamp>.<ext>`` if free, otherwise ``<stamp><letter>.<ext>``.
    """
    stamp = capture_timestamp(capture_time)
    ext = resolve_extension(original_filename, type_identifier)

    def with_ext(stem: str) -> str:
        return f"{stem}.{ext}" if ext else stem

    candidate = with_ext(stamp)
    if candidate not in used_names:
        used_names.add(candidate)
        return candidate

    seed = collision_seed(original_filename, fallback_seed)
    attempt = 0
    while True:
        cycle, offset = divmod(attempt, ALPHABET_SIZE)
        h = fnv1a64(seed) if cycle == 0 else fnv1a64(f"{seed}#{cycle}")
        # Each cycle owns its own 26 names; cycle 0 has no prefix.
        candidate = with_ext(f"{stamp}{cycle_prefix(cycle)}{alpha_letter(h, offset)}")
        if candidate not in used_names:
            used_names.add(candidate)
            return candidate
        attempt += 1


def fallback_seed(asset: Asset, resource: Resource) -> str:
    """Metadata seed that tells apart resources sharing an original name."""
    return "|".join([
        f"asset={asset.identifier}",
        f"mediaType={int(asset.media_type)}",
        f"subtypes={int(asset.subtypes)}",
        f"px={asset.pixel_width}x{asset.pixel_height}",
        f"dur={float(asset.duration)!r}",
        f"resType={int(resource.type)}",
        f"uti={resource.type_identifier}",
    ])


def filename_for_resource(
    asset: Asset,
    resource: Resource,
    capture_time: datetime,
    used_names: MutableSet[str],
) -> str:
    """Export filename for one resource of ``asset``."""
    return export_filename(
        capture_time=capture_time,
        original_filename=resource.original_filename,
        fallback_seed=fallback_seed(asset, resource),
        type_identifier=resource.type_identifier,
        used_names=used_names,
    )
