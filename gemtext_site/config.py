"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_MAX_FILE_SIZE, DEFAULT_SOURCE_EXTENSION, DEFAULT_TARGET_EXTENSION


@dataclass
class SiteConfig:
    """Configuration for building an HTML site from a gem-text tree.

    Attributes:
        source_extension: Suffix of the files that are converted.
        target_extension: Suffix given to converted files.
        escape_html: Whether to escape ``&``, ``<``, ``>`` and ``"`` in
            emitted content. Off by default, so markup in the source passes
            through unchanged.
        close_unterminated_preformatted: Whether to append ``</pre>`` when a
            document ends inside a preformatted block.
        max_file_size: Maximum file size in bytes that will be converted.
        jobs: Number of files converted concurrently.

    Examples:
        SiteConfig(source_extension=".gemini", escape_html=True)
    """

    # File selection
    source_extension: str = DEFAULT_SOURCE_EXTENSION
    target_extension: str = DEFAULT_TARGET_EXTENSION

    # Output
    escape_html: bool = False
    close_unterminated_preformatted: bool = False

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    jobs: int = 1


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`jobs` must be a positive integer")
    """


def load_config(search_path: Path) -> SiteConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.gemtext-site]`` table from `pyproject.toml` and the
    ``[gemtext-site]`` or ``[tool.gemtext-site]`` table from
    `.gemtext-site.toml` when present. Returns default values when no
    configuration is found. TOML files that cannot be read or decoded are
    skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        SiteConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("capsule"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "gemtext-site")]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / ".gemtext-site.toml",
            table_paths=[("gemtext-site",), ("tool", "gemtext-site")],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return SiteConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> SiteConfig | None:
    if not config_file.is_file():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> SiteConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    # TOML keys are conventionally dashed
    raw_config = {key.replace("-", "_"): value for key, value in raw_config.items()}

    try:
        return SiteConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def _normalize_extension(extension: object) -> object:
    if isinstance(extension, str) and extension and not extension.startswith("."):
        return f".{extension}"
    return extension


def normalize_config(config: SiteConfig) -> SiteConfig:
    """Prefix bare extensions such as ``"gmi"`` with a dot."""
    return replace(
        config,
        source_extension=_normalize_extension(config.source_extension),
        target_extension=_normalize_extension(config.target_extension),
    )


def validate_config(config: SiteConfig) -> None:
    """Validate a `SiteConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If extensions are empty, malformed or identical, flags are
            not booleans, or numeric limits are not positive integers.

    Examples:
        validate_config(SiteConfig(target_extension=".htm"))
    """
    config = normalize_config(config)

    for key in ("source_extension", "target_extension"):
        value = getattr(config, key)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"`{key}` must not be empty")
        if value == "." or "/" in value or "\\" in value or value.count(".") != 1:
            raise ConfigError(f"`{key}` must be a single suffix such as `.gmi`, got {value!r}")

    if config.source_extension == config.target_extension:
        raise ConfigError("`source_extension` and `target_extension` must differ")

    for key in ("escape_html", "close_unterminated_preformatted"):
        if not isinstance(getattr(config, key), bool):
            raise ConfigError(f"`{key}` must be a boolean")

    _ensure_integers({"max_file_size": config.max_file_size, "jobs": config.jobs})
    _ensure_positive({"max_file_size": config.max_file_size, "jobs": config.jobs})


def apply_overrides(config: SiteConfig, **overrides: object) -> SiteConfig:
    """Apply override values to a `SiteConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        SiteConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `SiteConfig`.

    Examples:
        updated = apply_overrides(config, escape_html=True, jobs=4)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> SiteConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        SiteConfig: Validated configuration ready for a build.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path("capsule"), target_extension=".htm")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
