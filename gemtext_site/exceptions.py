"""Package-specific exception types."""

from __future__ import annotations

from pathlib import Path


class SiteCopyError(IOError):
    """Raised when the source tree cannot be copied to the output directory.

    Args:
        source: Directory being copied.
        destination: Directory that should have been created.
        reason: Description of the underlying failure.
    """

    def __init__(self, source: Path, destination: Path, reason: str):
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to copy {source} to {destination}: {reason}")


class ConvertFileError(IOError):
    """Raised when a single gem-text file cannot be converted.

    Args:
        filepath: Source file that failed.
        reason: Description of the underlying failure.
    """

    def __init__(self, filepath: Path, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(reason)
