"""Gem-text to HTML conversion."""

from __future__ import annotations

import html

from .config import SiteConfig
from .constants import PREFORMATTED_FENCE, STRIP_LENGTHS, TAG_PREFIXES, WRAPPING_TAGS
from .models import BlockMode, TagKind, TransformResult


def classify(line: str) -> TagKind:
    """Determine the tag of a gem-text line from its leading characters.

    Prefixes are compared literally and case-sensitively in a fixed order;
    leading whitespace is significant.

    Args:
        line: A single line without its trailing newline.

    Returns:
        TagKind: Kind of the first matching prefix, or `TagKind.PLAIN_TEXT`.

    Examples:
        classify("## Section")  # TagKind.SECOND_HEADER
        classify(" # indented")  # TagKind.PLAIN_TEXT
    """
    for prefix, tag in TAG_PREFIXES:
        if line.startswith(prefix):
            return tag
    return TagKind.PLAIN_TEXT


def is_preformatted_toggle(line: str) -> bool:
    """Return True when the line opens or closes a preformatted block."""
    return line.startswith(PREFORMATTED_FENCE)


def escape_text(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for inclusion in HTML."""
    return html.escape(text, quote=False).replace('"', "&quot;")


def _open_preformatted(line: str, escape_html: bool) -> str:
    # The fence and one separating space are dropped; "```python" keeps "python".
    remainder = line[len(PREFORMATTED_FENCE) :]
    if remainder.startswith(" "):
        remainder = remainder[1:]
    if not remainder:
        return "<pre>"
    if escape_html:
        remainder = escape_text(remainder)
    return f"<pre>{remainder}\n"


def _render_link(line: str, escape_html: bool) -> str:
    target = line[STRIP_LENGTHS[TagKind.LINK] :]
    # Link targets cannot contain spaces
    space = target.find(" ")
    if space == -1:
        if escape_html:
            target = escape_text(target)
        return f"{target}\n"

    href = target[:space]
    name = target[space + 1 :]
    if escape_html:
        href = escape_text(href)
        name = escape_text(name)
    return f'<a href="{href}">{name}</a>\n'


def emit(
    tag: TagKind, line: str, mode: BlockMode, escape_html: bool = False
) -> tuple[str, BlockMode]:
    """Render one classified line as an HTML fragment.

    In `BlockMode.PREFORMATTED` only the toggle is interpreted: it closes the
    block with a bare ``</pre>`` and discards the rest of the line. Every other
    line is copied verbatim with a trailing newline.

    Args:
        tag: Classification of `line`.
        line: The source line, including its prefix.
        mode: Block mode before the line.
        escape_html: Whether to escape HTML-special characters in the content.

    Returns:
        tuple[str, BlockMode]: The fragment and the block mode after the line.

    Examples:
        emit(TagKind.FIRST_HEADER, "# Title", BlockMode.NORMAL)
        # ("<h1>Title</h1>\\n", BlockMode.NORMAL)
        emit(TagKind.PREFORMATTED_TOGGLE, "```", BlockMode.PREFORMATTED)
        # ("</pre>", BlockMode.NORMAL)
    """
    if mode is BlockMode.PREFORMATTED:
        if tag is TagKind.PREFORMATTED_TOGGLE:
            return "</pre>", BlockMode.NORMAL
        content = escape_text(line) if escape_html else line
        return f"{content}\n", mode

    if tag is TagKind.PREFORMATTED_TOGGLE:
        return _open_preformatted(line, escape_html), BlockMode.PREFORMATTED

    if tag is TagKind.LINK:
        return _render_link(line, escape_html), mode

    if tag in WRAPPING_TAGS:
        opening, closing = WRAPPING_TAGS[tag]
        content = line[STRIP_LENGTHS[tag] :]
    else:
        opening, closing = "", ""
        content = line

    if escape_html:
        content = escape_text(content)
    return f"{opening}{content}{closing}\n", mode


def transduce_line(
    line: str, mode: BlockMode, escape_html: bool = False
) -> tuple[str, BlockMode]:
    """Classify a line according to the current mode and render it.

    While preformatted, the only question asked of a line is whether it is the
    closing fence.
    """
    if mode is BlockMode.PREFORMATTED:
        tag = TagKind.PREFORMATTED_TOGGLE if is_preformatted_toggle(line) else TagKind.PLAIN_TEXT
    else:
        tag = classify(line)
    return emit(tag, line, mode, escape_html)


def split_lines(content: str) -> list[str]:
    """Split text on newlines; a final line without a newline still counts.

    Examples:
        split_lines("a\\nb")  # ["a", "b"]
        split_lines("a\\n")  # ["a"]
        split_lines("")  # []
    """
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def render_gemtext(content: str, config: SiteConfig | None = None) -> TransformResult:
    """Convert a gem-text document to HTML fragments.

    Each call owns its block mode, which starts as `BlockMode.NORMAL`, so
    documents may be converted concurrently.

    Args:
        content: The complete gem-text document.
        config: Output options. Defaults to a new `SiteConfig` when omitted.

    Returns:
        TransformResult: The HTML text, the number of lines read and the block
            mode at the end of the document.

    Examples:
        render_gemtext("# Title\\n```\\nx = 1\\n").unterminated_preformatted  # True
    """
    config = config or SiteConfig()
    mode = BlockMode.NORMAL
    fragments: list[str] = []

    lines = split_lines(content)
    for line in lines:
        fragment, mode = transduce_line(line, mode, config.escape_html)
        fragments.append(fragment)

    if mode is BlockMode.PREFORMATTED and config.close_unterminated_preformatted:
        fragments.append("</pre>")

    return TransformResult(html="".join(fragments), line_count=len(lines), final_mode=mode)


def transform_gemtext(content: str, config: SiteConfig | None = None) -> str:
    """Convert a gem-text document to HTML text.

    Examples:
        transform_gemtext("=> https://example.com Example\\n")
        # '<a href="https://example.com">Example</a>\\n'
    """
    return render_gemtext(content, config).html
