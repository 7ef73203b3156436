"""
Parser for the rich-text book descriptions returned by Google Books.

The markup is meant to be HTML but frequently is not valid HTML, and only
a tiny subset of it matters:

* ``<b>…</b>`` and ``<i>…</i>`` for bold and italic text;
* ``<br>`` for a line break;
* ``<p>`` for paragraphs, used in two incompatible ways.  Some
  descriptions use sensible ``<p>A paragraph.</p>`` containers, others
  write ``A paragraph.<p>Another one.`` with a lone ``<p>`` acting as a
  separator and no closing tags at all.

Conversion runs in two phases: ``detect_paragraph_convention`` classifies
the whole input once, then ``DescriptionParser`` scans it a single time
with that convention fixed.  Everything that is not one of the four tags
above is kept as literal text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from config import (
    BREAK,
    CLOSING_SLASH,
    PARAGRAPH_CLOSE_MARKER,
    TAG_CLOSE,
    TAG_NAMES,
    TAG_OPEN,
    TagType,
)
from models import ParagraphConvention, StyledText, TextFragment
from style_stack import ClosingPolicy, StyleStack

logger = logging.getLogger(__name__)


# ── phase 1: paragraph convention ─────────────────────────────────────────


def detect_paragraph_convention(text: str) -> ParagraphConvention:
    """Classify how *text* uses paragraph tags.

    Any ``</p>`` means proper paragraphs.  Without one, either there are no
    paragraphs at all or they are the separator kind, which are handled the
    same way.
    """
    if PARAGRAPH_CLOSE_MARKER in text:
        return ParagraphConvention.WELL_FORMED
    return ParagraphConvention.SEPARATOR


# ── tag recognition ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Tag:
    """A recognised tag occurrence."""

    type: TagType
    is_open: bool
    length: int  # characters consumed, both markers included


def recognize_tag(text: str, pos: int) -> Tag | None:
    """Try to read one of the known tags starting at ``text[pos]``.

    ``text[pos]`` must be the tag-open marker.  Returns ``None`` for any
    unknown name, for names with attributes, and when no close marker
    follows before the end of *text*.
    """
    if not text.startswith(TAG_OPEN, pos):
        raise ValueError(f"no {TAG_OPEN!r} at position {pos}")

    name_start = pos + len(TAG_OPEN)
    is_open = not text.startswith(CLOSING_SLASH, name_start)
    if not is_open:
        name_start += len(CLOSING_SLASH)

    close_pos = text.find(TAG_CLOSE, pos)
    if close_pos < name_start:
        # Either no close marker at all, or "</" is missing its name
        return None

    tag_type = TAG_NAMES.get(text[name_start:close_pos])
    if tag_type is None:
        return None

    return Tag(tag_type, is_open, close_pos + len(TAG_CLOSE) - pos)


# ── scan cursor ───────────────────────────────────────────────────────────


class ScanCursor:
    """Read and search positions over one input string.

    ``read`` marks the first character not yet copied into a fragment;
    ``search`` is where the next tag-open marker is looked for.
    ``read <= search`` always holds, and every move goes forward.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.read = 0
        self.search = 0

    def next_tag_open(self) -> int | None:
        pos = self.text.find(TAG_OPEN, self.search)
        return pos if pos >= 0 else None

    def take_until(self, end: int) -> str:
        """Return the literal text from ``read`` up to *end* (exclusive)."""
        if not self.read <= end <= len(self.text):
            raise IndexError(
                f"slice {self.read}:{end} out of bounds for length {len(self.text)}"
            )
        return self.text[self.read:end]

    def take_rest(self) -> str:
        return self.take_until(len(self.text))

    def reject(self, pos: int) -> None:
        """Keep the marker at *pos* as text and search again after it."""
        self.search = pos + len(TAG_OPEN)

    def consume(self, end: int) -> None:
        if end < self.search or end > len(self.text):
            raise IndexError(f"cannot move cursor back or past the end: {end}")
        self.read = self.search = end

    def skip_whitespace(self) -> None:
        end = self.read
        while end < len(self.text) and self.text[end].isspace():
            end += 1
        self.consume(end)


# ── phase 2: DescriptionParser ────────────────────────────────────────────


class DescriptionParser:
    """Single-pass scanner turning description markup into ``StyledText``.

    One instance may be reused for many inputs; no state survives a call
    to ``parse``.
    """

    def __init__(
        self,
        convention: ParagraphConvention,
        closing_policy: ClosingPolicy | None = None,
    ) -> None:
        self.convention = convention
        self.closing_policy = closing_policy

    # ── public entry point ──

    def parse(self, text: str) -> StyledText:
        """Convert *text* into styled fragments.

        Raises
        ------
        UnbalancedStyleError
            If a closing style tag has nothing to close.
        """
        cursor = ScanCursor(text)
        styles = StyleStack(self.closing_policy)
        fragments: list[TextFragment] = []
        current = ""

        while True:
            pos = cursor.next_tag_open()
            if pos is None:
                break
            tag = recognize_tag(text, pos)
            if tag is None:
                cursor.reject(pos)
                continue

            current += cursor.take_until(pos)
            cursor.consume(pos + tag.length)

            if tag.type.is_style:
                # Text so far keeps the style from before this tag
                fragments.append(TextFragment(current, styles.current))
                current = ""
                if tag.is_open:
                    styles.open(tag.type)
                else:
                    styles.close(tag.type)
            elif self._forces_break(tag):
                current = current.rstrip() + BREAK
                cursor.skip_whitespace()

        current += cursor.take_rest()
        fragments.append(TextFragment(current, styles.current))

        if styles.depth:
            logger.debug("%d style tag(s) left open at end of input", styles.depth)

        return StyledText(_cleanup(fragments))

    # ── helpers ──

    def _forces_break(self, tag: Tag) -> bool:
        if tag.type is TagType.LINEBREAK:
            return True
        if tag.type is TagType.PARAGRAPH:
            if self.convention is ParagraphConvention.WELL_FORMED:
                return not tag.is_open
            return True
        return False


def _cleanup(fragments: list[TextFragment]) -> list[TextFragment]:
    """Drop empty fragments and trim whitespace off the very end of the text."""
    kept = [f for f in fragments if f.text]
    while kept:
        kept[-1].text = kept[-1].text.rstrip()
        if kept[-1].text:
            break
        kept.pop()
    return kept


# ── public API ────────────────────────────────────────────────────────────


def parse_description(
    text: str | None,
    closing_policy: ClosingPolicy | None = None,
) -> StyledText | None:
    """Convert a Google Books description to ``StyledText``.

    Returns ``None`` when no description was supplied.

    Examples
    --------
    >>> parse_description("Some text with <p> wonky paragraphs.").plain_text
    'Some text with\\nwonky paragraphs.'
    """
    if text is None:
        return None

    convention = detect_paragraph_convention(text)
    logger.debug("Paragraph convention: %s", convention.value)
    return DescriptionParser(convention, closing_policy).parse(text)
