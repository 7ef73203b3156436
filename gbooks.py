"""
Google Books search client.

Only the volume fields needed to fill a library entry are mapped; the raw
``description`` is passed through untouched for ``parser_description``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from config import GOOGLE_BOOKS_VOLUMES_URL, REQUEST_TIMEOUT
from errors import ApiError, ResponseFormatError
from models import describe_book

logger = logging.getLogger(__name__)

# Preferred first
_ISBN_TYPES = ("ISBN_13", "ISBN_10")


def isbn_query(isbn: str) -> str:
    """Build a search query matching a single ISBN."""
    return f"isbn:{isbn.replace('-', '').strip()}"


@dataclass
class GBook:
    """One search result from Google Books."""

    id: str
    title: str
    authors: list[str] = field(default_factory=list)
    publisher: str | None = None
    published_date: str | None = None
    isbn: str | None = None
    image_link: str | None = None
    description: str | None = None

    def __str__(self) -> str:
        return describe_book(self.title, self.authors, self.publisher, self.published_date)

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> GBook:
        """Build a ``GBook`` from one element of a volumes ``items`` array."""
        try:
            info = item["volumeInfo"]
            book_id = item["id"]
            title = info["title"]
        except (KeyError, TypeError) as exc:
            raise ResponseFormatError(f"Unexpected Google Books volume: missing {exc}") from exc

        identifiers = {
            ident.get("type"): ident.get("identifier")
            for ident in info.get("industryIdentifiers") or []
        }
        isbn = next((identifiers[t] for t in _ISBN_TYPES if identifiers.get(t)), None)

        return cls(
            id=book_id,
            title=title,
            authors=list(info.get("authors") or []),
            publisher=info.get("publisher"),
            published_date=info.get("publishedDate"),
            isbn=isbn,
            image_link=(info.get("imageLinks") or {}).get("thumbnail"),
            description=info.get("description"),
        )


class GBooks:
    """Thin wrapper over the Google Books volumes endpoint."""

    def __init__(self, api_key: str, session: requests.Session | None = None) -> None:
        self._api_key = api_key
        self._session = session or requests.Session()

    def search(self, query: str) -> list[GBook]:
        """Return all volumes matching *query* (may be empty)."""
        params = {"key": self._api_key, "projection": "full", "q": query}
        logger.debug("Searching Google Books for %r", query)

        try:
            response = self._session.get(
                GOOGLE_BOOKS_VOLUMES_URL, params=params, timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise ApiError(f"Failed to send search request to Google Books: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ApiError(
                "Failed to read Google Books response", status=response.status_code,
            ) from exc

        if not response.ok:
            raise ApiError(
                f"Google Books search failed with status {response.status_code}",
                status=response.status_code,
                body=body,
            )

        items = body.get("items") or []
        logger.info("Google Books returned %d result(s) for %r", len(items), query)
        return [GBook.from_api(item) for item in items]
