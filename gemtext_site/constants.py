"""Constants used across the gemtext-site package."""

from __future__ import annotations

from .models import TagKind

# Literal line prefixes, tested in order; the first match wins.
TAG_PREFIXES: tuple[tuple[str, TagKind], ...] = (
    ("# ", TagKind.FIRST_HEADER),
    ("## ", TagKind.SECOND_HEADER),
    ("### ", TagKind.THIRD_HEADER),
    ("* ", TagKind.LIST_ELEMENT),
    (">", TagKind.QUOTE),
    ("=> ", TagKind.LINK),
    ("```", TagKind.PREFORMATTED_TOGGLE),
)
PREFORMATTED_FENCE = "```"

# Number of leading characters removed before the content is wrapped.
# Quotes drop two characters although the prefix is one character long.
STRIP_LENGTHS: dict[TagKind, int] = {
    TagKind.FIRST_HEADER: 2,
    TagKind.SECOND_HEADER: 3,
    TagKind.THIRD_HEADER: 4,
    TagKind.LIST_ELEMENT: 2,
    TagKind.QUOTE: 2,
    TagKind.LINK: 3,
}

# Opening and closing HTML for tags that wrap their whole content.
WRAPPING_TAGS: dict[TagKind, tuple[str, str]] = {
    TagKind.FIRST_HEADER: ("<h1>", "</h1>"),
    TagKind.SECOND_HEADER: ("<h2>", "</h2>"),
    TagKind.THIRD_HEADER: ("<h3>", "</h3>"),
    TagKind.LIST_ELEMENT: ("<li>", "</li>"),
    TagKind.QUOTE: ("<blockquote>", "</blockquote>"),
}

# Defaults
DEFAULT_SOURCE_EXTENSION = ".gmi"
DEFAULT_TARGET_EXTENSION = ".html"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
