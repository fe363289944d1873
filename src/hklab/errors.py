from __future__ import annotations

from pathlib import Path


class HklabError(Exception):
    """Base class for every error raised by hklab."""


class NoMatchError(HklabError, FileNotFoundError):
    def __init__(self, pattern: str, path: str | Path) -> None:
        self.pattern = pattern
        self.path = Path(path)
        super().__init__(f"No files found matching the pattern: {pattern} (in {self.path})")


class MissingCapabilityError(HklabError, ImportError):
    pass


class UnsupportedFormatError(HklabError, ValueError):
    pass


class PerFileReadError(HklabError, UserWarning):
    """A single file failed to read. Emitted as a warning, never raised by batch_read."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"Error reading file: {self.path}\nDetails: {message}")


class AllReadsFailedError(HklabError):
    pass


class CombineError(HklabError, ValueError):
    pass
