"""
Mapping of Google Books results onto library entries.
"""

from __future__ import annotations

import logging

from errors import DescriptionParseError
from gbooks import GBook
from models import BookEntry, StyledText
from parser_description import parse_description

logger = logging.getLogger(__name__)


def make_description(gbook: GBook) -> StyledText | None:
    """Convert the book's description, or ``None`` if there is none.

    A description that fails to parse is skipped rather than aborting the
    sync of the whole entry.
    """
    try:
        return parse_description(gbook.description)
    except DescriptionParseError as exc:
        logger.warning("Skipping description of %r: %s", gbook.title, exc)
        return None


def create_entry_from_gbook(gbook: GBook, owned: bool = False) -> BookEntry:
    return BookEntry(
        title=gbook.title,
        owned=owned,
        authors=list(gbook.authors),
        author_ids=[None] * len(gbook.authors),
        publisher=gbook.publisher,
        published_date=gbook.published_date,
        isbn=gbook.isbn,
        cover_url=gbook.image_link,
        description=make_description(gbook),
    )


def update_entry_from_gbook(entry: BookEntry, gbook: GBook) -> BookEntry:
    """Fill the empty fields of *entry* from *gbook*, in place.

    Fields that already hold a value are never overwritten.
    """
    if not entry.authors:
        entry.authors = list(gbook.authors)
        entry.author_ids = [None] * len(entry.authors)

    if entry.publisher is None:
        entry.publisher = gbook.publisher
        entry.publisher_id = None

    if entry.published_date is None:
        entry.published_date = gbook.published_date

    if entry.isbn is None:
        entry.isbn = gbook.isbn

    if entry.cover_url is None:
        entry.cover_url = gbook.image_link

    if not entry.had_original_description:
        entry.description = make_description(gbook)

    return entry
