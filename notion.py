"""
Notion client for the library database.

Reads and writes ``BookEntry`` pages and renders ``StyledText`` into a
single paragraph block of rich-text runs.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from config import (
    ENTRY_TYPE_BOOK,
    NOTION_API_URL,
    NOTION_VERSION,
    OWNERSHIP_OWN,
    PROP_AUTHORS,
    PROP_ISBN,
    PROP_NAME,
    PROP_OWNERSHIP,
    PROP_PUBLISH_DATE,
    PROP_PUBLISHER,
    PROP_TYPE,
    REQUEST_TIMEOUT,
)
from errors import ApiError, BookSyncError, ResponseFormatError
from models import BookEntry, StyledText, TextFragment

logger = logging.getLogger(__name__)


# ── payload builders ──────────────────────────────────────────────────────


def _rich_text_value(content: str) -> dict[str, Any]:
    return {"rich_text": [{"text": {"content": content}}]}


def _select_option(name: str, option_id: str | None) -> dict[str, Any]:
    if option_id is not None:
        return {"id": option_id, "name": name}
    return {"name": name}


def properties_from_entry(entry: BookEntry) -> dict[str, Any]:
    """Build the ``properties`` object of a page create/update request.

    Empty fields are left out so that an update never clears a property.
    """
    properties: dict[str, Any] = {
        PROP_TYPE: {"select": {"name": ENTRY_TYPE_BOOK}},
        PROP_NAME: {"title": [{"text": {"content": entry.title}}]},
    }

    if entry.owned:
        properties[PROP_OWNERSHIP] = {"select": {"name": OWNERSHIP_OWN}}

    author_ids = list(entry.author_ids) + [None] * (len(entry.authors) - len(entry.author_ids))
    authors = [
        _select_option(name, option_id)
        for name, option_id in zip(entry.authors, author_ids)
    ]
    if authors:
        properties[PROP_AUTHORS] = {"multi_select": authors}

    if entry.publisher:
        # Commas are not allowed in select option names
        name = entry.publisher.replace(",", "")
        properties[PROP_PUBLISHER] = {"select": _select_option(name, entry.publisher_id)}

    if entry.published_date:
        properties[PROP_PUBLISH_DATE] = _rich_text_value(entry.published_date)

    if entry.isbn:
        properties[PROP_ISBN] = _rich_text_value(entry.isbn)

    return properties


def _text_run(fragment: TextFragment) -> dict[str, Any]:
    return {
        "type": "text",
        "text": {"content": fragment.text},
        "annotations": {
            "bold": fragment.style.bold,
            "italic": fragment.style.italic,
        },
    }


def rich_text_to_block(text: StyledText) -> dict[str, Any]:
    """Render *text* as one paragraph block, one text run per fragment."""
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": [_text_run(f) for f in text]},
    }


# ── page parsing ──────────────────────────────────────────────────────────


def _first_plain_text(items: list[dict[str, Any]]) -> str | None:
    if not items:
        return None
    return items[0]["plain_text"]


def entry_from_page(page: dict[str, Any]) -> BookEntry:
    """Parse a page object returned by the Notion API.

    The description is never read back; ``had_original_description`` is
    filled in separately by ``Database.get_description``.
    """
    try:
        props = page["properties"]

        authors_raw = props[PROP_AUTHORS]["multi_select"]
        publisher = props[PROP_PUBLISHER]["select"]
        ownership = props[PROP_OWNERSHIP]["select"]
        cover = page.get("cover")

        return BookEntry(
            id=page["id"],
            title=props[PROP_NAME]["title"][0]["plain_text"],
            owned=bool(ownership) and ownership["name"] == OWNERSHIP_OWN,
            authors=[a["name"] for a in authors_raw],
            author_ids=[a["id"] for a in authors_raw],
            publisher=publisher["name"] if publisher else None,
            publisher_id=publisher["id"] if publisher else None,
            published_date=_first_plain_text(props[PROP_PUBLISH_DATE]["rich_text"]),
            isbn=_first_plain_text(props[PROP_ISBN]["rich_text"]),
            cover_url=cover["external"]["url"] if isinstance(cover, dict) else None,
        )
    except (KeyError, IndexError, TypeError) as exc:
        raise ResponseFormatError(f"Failed to parse database entry: missing {exc}") from exc


# ── client ────────────────────────────────────────────────────────────────


class Notion:
    """Authenticated access to the Notion REST API."""

    def __init__(self, integration_token: str, session: requests.Session | None = None) -> None:
        self._token = integration_token
        self._session = session or requests.Session()

    def database(self, database_id: str) -> Database:
        return Database(self, database_id)

    def request(
        self,
        method: str,
        endpoint: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one API request and return the decoded JSON body.

        Raises
        ------
        ApiError
            On transport failure, undecodable body or non-2xx status.
        """
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Notion-Version": NOTION_VERSION,
        }
        url = f"{NOTION_API_URL}{endpoint}"
        logger.debug("%s %s", method, url)

        try:
            response = self._session.request(
                method, url, headers=headers, json=json, timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise ApiError(f"Failed to send Notion API request: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ApiError(
                "Failed to read Notion API response", status=response.status_code,
            ) from exc

        if not response.ok:
            raise ApiError(
                f"Notion API error {response.status_code}: {body.get('message', body)}",
                status=response.status_code,
                body=body,
            )

        return body


class Database:
    """The library database holding one page per book."""

    def __init__(self, notion: Notion, database_id: str) -> None:
        self.notion = notion
        self.database_id = database_id

    # ── queries ──

    def search(self, title: str) -> list[BookEntry]:
        """Return entries whose title contains *title*."""
        body = {
            "filter": {
                "and": [{
                    "property": "title",
                    "title": {"contains": title},
                }]
            }
        }
        response = self.notion.request(
            "POST", f"/databases/{self.database_id}/query", json=body,
        )

        results = response.get("results")
        if not isinstance(results, list):
            raise ResponseFormatError("No results array in Notion API response")

        entries = [entry_from_page(page) for page in results]
        logger.info("Found %d matching entries for %r", len(entries), title)
        return [self.get_description(entry) for entry in entries]

    def get_description(self, entry: BookEntry) -> BookEntry:
        """Record on *entry* whether its page already has a body."""
        if entry.id is None:
            raise BookSyncError("Tried to retrieve description for entry without ID")

        response = self.notion.request("GET", f"/blocks/{entry.id}/children")
        results = response.get("results")
        if not isinstance(results, list):
            raise ResponseFormatError("Get blocks API response has no results")

        entry.had_original_description = bool(results)
        return entry

    # ── writes ──

    def set_description(self, page_id: str, description: StyledText) -> None:
        self.notion.request(
            "PATCH",
            f"/blocks/{page_id}/children",
            json={"children": [rich_text_to_block(description)]},
        )

    def add_entry(self, entry: BookEntry) -> BookEntry:
        """Create a page for *entry* and return it with its new id."""
        body: dict[str, Any] = {
            "parent": {"database_id": self.database_id},
            "properties": properties_from_entry(entry),
        }
        if entry.cover_url:
            body["cover"] = {"external": {"url": entry.cover_url}}

        response = self.notion.request("POST", "/pages/", json=body)
        added = entry_from_page(response)
        logger.info("Added entry %s", added)

        if entry.description is not None:
            self.set_description(added.id, entry.description)
            added.description = entry.description
        return added

    def update_entry(self, entry: BookEntry) -> None:
        """Update the properties of an existing page.

        The description is only written when the page had no body before.
        """
        if entry.id is None:
            raise BookSyncError("Tried to update entry but don't know ID")

        body: dict[str, Any] = {"properties": properties_from_entry(entry)}
        if entry.cover_url:
            body["cover"] = {"external": {"url": entry.cover_url}}

        self.notion.request("PATCH", f"/pages/{entry.id}", json=body)
        logger.info("Updated entry %s", entry)

        if entry.description is not None and not entry.had_original_description:
            self.set_description(entry.id, entry.description)
