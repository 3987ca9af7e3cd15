"""
gemtext-site: static site generator for gem-text capsules.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    gemtext-site capsule/ public/

Library Usage:
    from gemtext_site import transform_gemtext

    html = transform_gemtext("# Title\\n=> https://example.com Example\\n")
"""

from .config import ConfigError, SiteConfig
from .exceptions import ConvertFileError, SiteCopyError
from .filesystem import build_site, rewrite_source_file
from .models import BlockMode, BuildReport, FileFailure, TagKind, TransformResult
from .transducer import classify, emit, render_gemtext, transduce_line, transform_gemtext

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "classify",
    "emit",
    "transduce_line",
    "render_gemtext",
    "transform_gemtext",
    # Site building
    "build_site",
    "rewrite_source_file",
    # Data models
    "BlockMode",
    "BuildReport",
    "FileFailure",
    "SiteConfig",
    "TagKind",
    "TransformResult",
    # Exceptions
    "ConfigError",
    "ConvertFileError",
    "SiteCopyError",
    # Version
    "__version__",
]
