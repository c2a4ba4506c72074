"""Exception hierarchy for the exporter.

Each failure category has its own exception type carrying the fields that
matter for it. Every exception renders the same compact ``key=value``
detail string (``details()``) used on stderr and in the error ledger.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

EXPORT_DOMAIN = "PhotosExport"


class ExportError(Exception):
    """Base exception for all exporter errors."""

    default_code = 0

    def __init__(
        self,
        description: str,
        *,
        domain: str = EXPORT_DOMAIN,
        code: Optional[int] = None,
        underlying: Optional[BaseException] = None,
        reason: Optional[str] = None,
        recovery: Optional[str] = None,
    ):
        super().__init__(description)
        self.description = description
        self.domain = domain
        self.code = self.default_code if code is None else code
        self.underlying = underlying
        self.reason = reason
        self.recovery = recovery

    def details(self) -> str:
        parts = [f"domain={self.domain}", f"code={self.code}"]
        if self.description:
            parts.append(f"desc={self.description}")
        if self.underlying is not None:
            domain, code, desc = _describe(self.underlying)
            parts.append(f"underlying={domain}({code})")
            if desc:
                parts.append(f"underDesc={desc}")
        if self.reason:
            parts.append(f"reason={self.reason}")
        if self.recovery:
            parts.append(f"recovery={self.recovery}")
        return " ".join(parts)


class SettingsError(ExportError):
    """Invalid command-line or configuration values."""
    default_code = 30


class AuthorizationDeniedError(ExportError):
    """Access to the asset library was refused."""
    default_code = 1

    def __init__(self, status: str, **kwargs):
        super().__init__(f"Photos access denied: {status}", **kwargs)
        self.status = status


class ExportPathNotADirectoryError(ExportError):
    """A path that must be a directory exists as something else."""
    default_code = 10

    def __init__(self, path: Path, **kwargs):
        super().__init__(f"Path exists but is not a directory: {path}", **kwargs)
        self.path = path


class MissingCaptureTimeError(ExportError):
    """The asset has no capture timestamp."""
    default_code = 3

    def __init__(self, asset_id: str):
        super().__init__("Missing creationDate")
        self.asset_id = asset_id


class ResourceClearError(ExportError):
    """An existing destination file could not be removed before overwrite."""
    default_code = 21

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(f"Could not remove existing file: {path}", underlying=cause)
        self.path = path
        self.cause = cause


class ResourceWriteError(ExportError):
    """The resource writer failed to materialize the resource bytes.

    Carries whatever structured detail the writer supplied.
    """
    default_code = 4

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ResourceWriteError":
        """Wrap an arbitrary writer exception, keeping its domain and code."""
        if isinstance(exc, ResourceWriteError):
            return exc
        domain, code, desc = _describe(exc)
        return cls(
            desc or exc.__class__.__name__,
            domain=domain,
            code=code,
            underlying=exc.__cause__,
        )


class PartialExportError(ExportError):
    """One or more resources of an asset failed to export."""
    default_code = 20

    def __init__(
        self,
        asset_id: str,
        capture: str,
        failures: Sequence[str],
        total: int,
        meta: str = "",
    ):
        head = f"One or more resources failed to export ({len(failures)}/{total})"
        if meta:
            head = f"{head} {meta}"
        super().__init__(f"{head}. Failed: {'; '.join(failures)}")
        self.asset_id = asset_id
        self.capture = capture
        self.failures = tuple(failures)
        self.total = total

    @property
    def failed_count(self) -> int:
        return len(self.failures)


def _describe(exc: BaseException) -> tuple[str, int, str]:
    """Return (domain, code, description) for any exception."""
    if isinstance(exc, ExportError):
        return exc.domain, exc.code, exc.description
    if isinstance(exc, OSError):
        code = exc.errno if exc.errno is not None else 0
        desc = exc.strerror or str(exc)
        if exc.filename is not None and exc.strerror:
            desc = f"{exc.strerror}: {exc.filename}"
        return exc.__class__.__name__, code, desc
    return exc.__class__.__name__, 0, str(exc)


def error_details(exc: BaseException) -> str:
    """Render an exception as ``domain=... code=... desc=...``."""
    if isinstance(exc, ExportError):
        return exc.details()
    domain, code, desc = _describe(exc)
    parts = [f"domain={domain}", f"code={code}"]
    if desc:
        parts.append(f"desc={desc}")
    cause = exc.__cause__
    if cause is not None:
        under_domain, under_code, under_desc = _describe(cause)
        parts.append(f"underlying={under_domain}({under_code})")
        if under_desc:
            parts.append(f"underDesc={under_desc}")
    return " ".join(parts)
