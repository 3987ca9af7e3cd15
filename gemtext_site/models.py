"""Data models for gemtext-site."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path


class TagKind(Enum):
    """Kinds of gem-text lines.

    Attributes:
        PLAIN_TEXT: Line without a recognized prefix.
        FIRST_HEADER: Line starting with ``"# "``.
        SECOND_HEADER: Line starting with ``"## "``.
        THIRD_HEADER: Line starting with ``"### "``.
        LIST_ELEMENT: Line starting with ``"* "``.
        QUOTE: Line starting with ``">"``.
        LINK: Line starting with ``"=> "``.
        PREFORMATTED_TOGGLE: Line starting with three backticks.
    """

    PLAIN_TEXT = auto()
    FIRST_HEADER = auto()
    SECOND_HEADER = auto()
    THIRD_HEADER = auto()
    LIST_ELEMENT = auto()
    QUOTE = auto()
    LINK = auto()
    PREFORMATTED_TOGGLE = auto()


class BlockMode(Enum):
    """Transducer states used while scanning gem-text content.

    Attributes:
        NORMAL: Lines are classified and converted one by one.
        PREFORMATTED: Lines are copied verbatim until the closing fence.
    """

    NORMAL = auto()
    PREFORMATTED = auto()


@dataclass
class TransformResult:
    """Structured result of transforming a gem-text document.

    Attributes:
        html: Concatenated HTML fragments.
        line_count: Number of source lines processed.
        final_mode: Block mode after the last line.
    """

    html: str
    line_count: int
    final_mode: BlockMode = BlockMode.NORMAL

    @property
    def unterminated_preformatted(self) -> bool:
        return self.final_mode is BlockMode.PREFORMATTED


@dataclass
class FileFailure:
    """A source file that could not be converted.

    Attributes:
        path: Path of the source file inside the output tree.
        reason: Human-readable error message.
    """

    path: Path
    reason: str


@dataclass
class BuildReport:
    """Outcome of a site build.

    Attributes:
        converted: Destination paths of the converted files.
        failures: Files that could not be converted.
    """

    converted: list[Path] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
