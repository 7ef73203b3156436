"""
Data models for styled description text and library entries.

Contains the TextStyle / TextFragment / StyledText value types produced by
the description parser, the ParagraphConvention enum, and the BookEntry
record stored in the Notion library database.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator

from config import TagType


# ── Styles ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TextStyle:
    """Emphasis active for a run of text.

    Both attributes are independent; all four combinations are emitted
    literally.
    """

    bold: bool = False
    italic: bool = False

    def with_tag(self, tag: TagType) -> TextStyle:
        """Return a copy with the attribute named by style *tag* switched on."""
        if tag is TagType.BOLD:
            return replace(self, bold=True)
        if tag is TagType.ITALIC:
            return replace(self, italic=True)
        raise ValueError(f"{tag.value!r} is not a style tag")


class ParagraphConvention(str, Enum):
    """How ``p`` tags are used in one particular description."""

    # <p>A paragraph.</p>: the closing tag ends a line
    WELL_FORMED = "well_formed"
    # A paragraph.<p>Another one: every p tag separates blocks
    SEPARATOR = "separator"


# ── Fragments ─────────────────────────────────────────────────────────────


@dataclass
class TextFragment:
    """A run of text sharing one exact style."""

    text: str
    style: TextStyle = field(default_factory=TextStyle)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "bold": self.style.bold,
            "italic": self.style.italic,
        }


@dataclass
class StyledText:
    """Ordered fragments of a converted description, in reading order.

    Never holds a fragment with empty text.
    """

    fragments: list[TextFragment] = field(default_factory=list)

    def __iter__(self) -> Iterator[TextFragment]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)

    @property
    def plain_text(self) -> str:
        """Concatenated fragment texts with all styling dropped."""
        return "".join(f.text for f in self.fragments)

    def to_list(self) -> list[dict[str, Any]]:
        return [f.to_dict() for f in self.fragments]


# ── Library entries ───────────────────────────────────────────────────────


def describe_book(
    title: str,
    authors: list[str],
    publisher: str | None,
    published_date: str | None,
) -> str:
    """Render ``"Title by A, B (Publisher, Date)"`` omitting missing parts."""
    text = f"{title} by {', '.join(authors)}"
    extra = [part for part in (publisher, published_date) if part]
    if extra:
        text += f" ({', '.join(extra)})"
    return text


@dataclass
class BookEntry:
    """A page of the Notion library database.

    ``author_ids`` runs parallel to ``authors``; ``None`` marks an author
    that does not yet exist as a select option.

    The page body is only ever written, never read back: when
    ``had_original_description`` is set the existing body is left alone
    on update so that no data is lost.
    """

    title: str
    id: str | None = None
    owned: bool = False
    authors: list[str] = field(default_factory=list)
    author_ids: list[str | None] = field(default_factory=list)
    publisher: str | None = None
    publisher_id: str | None = None
    published_date: str | None = None
    isbn: str | None = None
    cover_url: str | None = None
    description: StyledText | None = None
    had_original_description: bool = False

    def __str__(self) -> str:
        text = describe_book(self.title, self.authors, self.publisher, self.published_date)
        if self.isbn:
            text += f" ({self.isbn})"
        return text
