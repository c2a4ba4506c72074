"""Naming engine and type identifier mapping."""
from .naming import (
    capture_timestamp,
    export_filename,
    filename_for_resource,
    fallback_seed,
    fnv1a64,
    alpha_letter,
)
from .type_identifiers import preferred_extension, identifier_for_extension

__all__ = [
    "capture_timestamp",
    "export_filename",
    "filename_for_resource",
    "fallback_seed",
    "fnv1a64",
    "alpha_letter",
    "preferred_extension",
    "identifier_for_extension",
]
