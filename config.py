"""
Configuration for the book description converter and library sync.

Contains the TagType enum, markup marker constants, remote API constants
and the credential loader used by the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from errors import ConfigError


class TagType(str, Enum):
    """The only tags that carry meaning inside a description.

    Values are the literal tag names as they appear between the markers.
    """

    BOLD = "b"
    ITALIC = "i"
    PARAGRAPH = "p"
    LINEBREAK = "br"

    @property
    def is_style(self) -> bool:
        return self in STYLE_TAGS


STYLE_TAGS: frozenset[TagType] = frozenset({TagType.BOLD, TagType.ITALIC})
BREAK_TAGS: frozenset[TagType] = frozenset({TagType.PARAGRAPH, TagType.LINEBREAK})

# Case-sensitive name lookup; no attributes, no whitespace tolerated
TAG_NAMES: dict[str, TagType] = {t.value: t for t in TagType}


# ---------------------------------------------------------------------------
# Markup markers
# ---------------------------------------------------------------------------

TAG_OPEN = "<"
TAG_CLOSE = ">"
CLOSING_SLASH = "/"

# Presence anywhere in the input selects the well-formed paragraph convention
PARAGRAPH_CLOSE_MARKER = f"{TAG_OPEN}{CLOSING_SLASH}{TagType.PARAGRAPH.value}{TAG_CLOSE}"

BREAK = "\n"


# ---------------------------------------------------------------------------
# Remote APIs
# ---------------------------------------------------------------------------

GOOGLE_BOOKS_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-02-22"

REQUEST_TIMEOUT = 30  # seconds

# Property names of the Notion library database
PROP_NAME = "Name"
PROP_TYPE = "Type"
PROP_OWNERSHIP = "Ownership"
PROP_AUTHORS = "Authors"
PROP_PUBLISHER = "Publisher"
PROP_PUBLISH_DATE = "Publish Date"
PROP_ISBN = "ISBN"

ENTRY_TYPE_BOOK = "Book"
OWNERSHIP_OWN = "Own"


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

ENV_GOOGLE_BOOKS_API_KEY = "GOOGLE_BOOKS_API_KEY"
ENV_NOTION_TOKEN = "NOTION_INTEGRATION_TOKEN"
ENV_NOTION_DATABASE_ID = "NOTION_DATABASE_ID"


@dataclass(frozen=True)
class Settings:
    """Credentials needed by the sync workflow."""

    google_books_api_key: str
    notion_integration_token: str
    notion_database_id: str


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Load credentials from *env_file* (default: ``./.env``) and the environment.

    Variables already present in the process environment win over the file.

    Raises
    ------
    ConfigError
        If any of the required variables is missing or empty.
    """
    load_dotenv(dotenv_path=env_file, override=False)

    names = (ENV_GOOGLE_BOOKS_API_KEY, ENV_NOTION_TOKEN, ENV_NOTION_DATABASE_ID)
    values = {name: (os.getenv(name) or "").strip() for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(
            f"Missing configuration: {', '.join(missing)} "
            f"(set them in the environment or in a .env file)"
        )

    return Settings(
        google_books_api_key=values[ENV_GOOGLE_BOOKS_API_KEY],
        notion_integration_token=values[ENV_NOTION_TOKEN],
        notion_database_id=values[ENV_NOTION_DATABASE_ID],
    )
