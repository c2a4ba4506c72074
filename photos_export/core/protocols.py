"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .models import Asset, Resource


class AssetSource(Protocol):
    """Interface to the library that owns the assets.

    Implementations:
    - DirectoryAssetSource: a library kept as a plain directory tree
    """

    @abstractmethod
    def request_access(self) -> None:
        """Block until access is granted.

        Raises:
            AuthorizationDeniedError: Access was refused.
        """
        ...

    @abstractmethod
    def fetch_assets(self, start: datetime, end: datetime) -> Iterable[Asset]:
        """Assets captured within [start, end], in ascending capture order.

        The returned sequence is finite and may only be iterated once.
        """
        ...

    @abstractmethod
    def resources_of(self, asset: Asset) -> Iterable[Resource]:
        """Resources of an asset, in the library's own order."""
        ...


class ResourceWriter(Protocol):
    """Interface for materializing resource bytes on disk."""

    @abstractmethod
    def write(self, resource: Resource, destination: Path) -> None:
        """Write the resource to ``destination``.

        May block for a long time (network-backed fetches are allowed).

        Raises:
            ResourceWriteError: The bytes could not be written.
        """
        ...


class ProgressReporter(Protocol):
    """Interface for progress reporting."""

    @abstractmethod
    def start_phase(self, name: str, total: int) -> None:
        """Start a new processing phase."""
        ...

    @abstractmethod
    def advance_phase(self, amount: int = 1, description: Optional[str] = None) -> None:
        """Advance the current phase by an amount."""
        ...

    @abstractmethod
    def end_phase(self) -> None:
        """Complete current phase."""
        ...

    @abstractmethod
    def info(self, message: str) -> None:
        """Log an info message."""
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        """Log a warning message."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Log an error message."""
        ...
