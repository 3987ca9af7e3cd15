"""Filesystem helpers for gemtext-site."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TextIO

from .config import SiteConfig
from .constants import DEFAULT_MAX_FILE_SIZE
from .exceptions import ConvertFileError, SiteCopyError
from .models import BuildReport, FileFailure
from .transducer import render_gemtext

MAX_FILE_SIZE_ENV_VAR = "GEMTEXT_SITE_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed file size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["GEMTEXT_SITE_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if max_size <= 0:
        error_message = f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}."
        raise ValueError(error_message)

    return max_size


def copy_tree(source: Path, destination: Path) -> None:
    """Recursively copy `source` into a new directory `destination`.

    Args:
        source: Existing directory to copy.
        destination: Directory to create; it must not exist yet.

    Returns:
        None.

    Raises:
        SiteCopyError: If `source` is not a directory, `destination` already
            exists, or the copy fails.

    Examples:
        copy_tree(Path("capsule"), Path("public"))
    """
    if not source.is_dir():
        raise SiteCopyError(source, destination, f"{source} is not a directory")
    if destination.exists():
        raise SiteCopyError(source, destination, f"{destination} already exists")

    try:
        shutil.copytree(source, destination)
    except (OSError, shutil.Error) as error:
        raise SiteCopyError(source, destination, str(error)) from error


def find_source_files(root: Path, extension: str) -> list[Path]:
    """List regular files under `root` whose suffix equals `extension`.

    Args:
        root: Directory to walk recursively.
        extension: Suffix including the leading dot, compared case-sensitively.

    Returns:
        list[Path]: Matching files in sorted order.

    Examples:
        find_source_files(Path("public"), ".gmi")
    """
    return sorted(
        path for path in root.rglob(f"*{extension}") if path.suffix == extension and path.is_file()
    )


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a file while disallowing symlinks.

    Args:
        filepath: Path to the file.

    Returns:
        os.stat_result: File metadata gathered without following symlinks.

    Raises:
        IOError: If the path is inaccessible, a symlink, or not a regular file.
    """
    try:
        stat_result = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if stat.S_ISLNK(stat_result.st_mode):
        error_message = f"Symlinks are not supported: {filepath}."
        raise IOError(error_message)

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path):
    """Guard against files that exceed the configured maximum size.

    Raises:
        IOError: If `stat_result.st_size` exceeds `max_size`.
    """
    if stat_result.st_size > max_size:
        error_message = f"{filepath} exceeds the maximum allowed size of {max_size} bytes."
        raise IOError(error_message)


def safe_read(filepath: Path) -> TextIO:
    """Open a file for reading with consistent error handling.

    Args:
        filepath: Path to the file.

    Returns:
        TextIO: File handle opened for reading in UTF-8.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.

    Examples:
        with safe_read(Path("index.gmi")) as handle:
            first_line = handle.readline()
    """
    try:
        return open(filepath, "r", encoding="UTF-8", newline="")
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def write_atomically(filepath: Path, content: str, permissions: int) -> None:
    """Write `content` to a new file through a temporary sibling.

    Raises:
        IOError: If `filepath` already exists or cannot be written.
    """
    if filepath.exists():
        raise IOError(f"{filepath} already exists; refusing to overwrite.")

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", newline="", delete=False, dir=filepath.parent
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            os.chmod(tmp_file.name, permissions)

        os.replace(temp_path, filepath)
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass


def rewrite_source_file(
    filepath: Path,
    config: SiteConfig | None = None,
    warn: Callable[[str], None] | None = None,
) -> Path:
    """Replace a gem-text file with its HTML conversion.

    The converted text is written next to the source with the target extension,
    then the source file is removed.

    Args:
        filepath: Gem-text file to convert.
        config: Conversion options; defaults to a new `SiteConfig`.
        warn: Optional callback for non-fatal warnings, such as a document
            ending inside a preformatted block.

    Returns:
        Path: The written destination file.

    Raises:
        ConvertFileError: If the file is unreadable, too large, not valid UTF-8,
            the destination already exists, or writing fails.

    Examples:
        rewrite_source_file(Path("public/index.gmi"))  # Path("public/index.html")
    """
    config = config or SiteConfig()
    destination = filepath.with_suffix(config.target_extension)

    try:
        file_stat = collect_file_stat(filepath)
        enforce_file_size(file_stat, config.max_file_size, filepath)
        with safe_read(filepath) as file:
            content = file.read()
    except UnicodeDecodeError as error:
        raise ConvertFileError(filepath, f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except IOError as error:
        raise ConvertFileError(filepath, str(error)) from error

    result = render_gemtext(content, config)
    if result.unterminated_preformatted and not config.close_unterminated_preformatted and warn:
        warn(f"Warning: {filepath} ends inside a preformatted block")

    try:
        write_atomically(destination, result.html, stat.S_IMODE(file_stat.st_mode))
    except IOError as error:
        raise ConvertFileError(filepath, f"Could not write {destination}: {error}") from error

    try:
        filepath.unlink()
    except OSError as error:
        # A failed conversion leaves only the source
        destination.unlink(missing_ok=True)
        raise ConvertFileError(filepath, f"Could not remove {filepath}: {error}") from error

    return destination


def build_site(
    source: Path,
    destination: Path,
    config: SiteConfig | None = None,
    warn: Callable[[str], None] | None = None,
) -> BuildReport:
    """Copy a directory tree and convert every gem-text file inside the copy.

    A file that fails to convert is recorded in the report; the remaining files
    are still converted.

    Args:
        source: Directory to copy.
        destination: Output directory; it must not exist.
        config: Build options; defaults to a new `SiteConfig`.
        warn: Optional callback for non-fatal warnings.

    Returns:
        BuildReport: Converted destination paths and per-file failures.

    Raises:
        SiteCopyError: If the tree cannot be copied.

    Examples:
        report = build_site(Path("capsule"), Path("public"), SiteConfig(jobs=4))
    """
    config = config or SiteConfig()
    copy_tree(source, destination)
    source_files = find_source_files(destination, config.source_extension)

    def convert(filepath: Path) -> Path | FileFailure:
        try:
            return rewrite_source_file(filepath, config, warn)
        except ConvertFileError as error:
            return FileFailure(path=filepath, reason=error.reason)

    if config.jobs > 1 and len(source_files) > 1:
        with ThreadPoolExecutor(max_workers=config.jobs) as executor:
            outcomes = list(executor.map(convert, source_files))
    else:
        outcomes = [convert(filepath) for filepath in source_files]

    report = BuildReport()
    for outcome in outcomes:
        if isinstance(outcome, FileFailure):
            report.failures.append(outcome)
        else:
            report.converted.append(outcome)
    return report
