#!/usr/bin/env python3
"""
CLI entry point for the book description converter and library sync.

Commands
--------
describe
    Convert one Google Books description (file or stdin) into styled
    fragments and print them as JSON.
sync
    Interactive loop: search Google Books, pick a result, then create or
    update the matching page of the Notion library database.

Usage
-----
    # Preview how a description will be converted
    python convert.py describe --file description.html
    echo 'Some <b>bold</b> text.' | python convert.py describe

    # Add books by title, marking them as owned
    python convert.py sync --owned

    # Add books by ISBN, credentials from a custom env file
    python convert.py sync --isbn --env-file ~/.config/books.env
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from config import load_settings
from errors import BookSyncError, DescriptionParseError
from gbooks import GBook, GBooks, isbn_query
from models import BookEntry
from notion import Database, Notion
from parser_description import parse_description
from sync import create_entry_from_gbook, update_entry_from_gbook

logger = logging.getLogger(__name__)

YES_ANSWERS = {"y", "yes"}


# ── prompts ───────────────────────────────────────────────────────────────


def read_line(prompt: str) -> str:
    return input(prompt).rstrip()


def choose_index(prompt: str, count: int) -> int:
    """Ask for a number in ``range(count)``; raise ``ValueError`` otherwise."""
    choice = int(read_line(prompt))
    if not 0 <= choice < count:
        raise ValueError(f"choice {choice} out of range 0..{count - 1}")
    return choice


# ── describe ──────────────────────────────────────────────────────────────


def describe(file_path: Path | None) -> int:
    """Print the converted fragments of a description as JSON."""
    if file_path is None:
        text = sys.stdin.read()
    else:
        text = file_path.read_text(encoding="utf-8")

    try:
        styled = parse_description(text)
    except DescriptionParseError as exc:
        print(f"Error: failed to parse description: {exc}", file=sys.stderr)
        return 1

    json.dump(styled.to_list(), sys.stdout, ensure_ascii=False, indent=2)
    print()
    return 0


# ── sync ──────────────────────────────────────────────────────────────────


def pick_book(results: list[GBook]) -> GBook:
    if len(results) == 1:
        return results[0]

    print("Choose book:")
    for i, book in enumerate(results):
        print(f"{i}: {book}")
    return results[choose_index("> ", len(results))]


def sync_book(database: Database, gbook: GBook, owned: bool) -> bool:
    """Create or update the entry for *gbook*.

    Returns ``False`` when the user declines to create a new entry.
    """
    matches = database.search(gbook.title)

    if matches:
        print("Choose what you want to do:")
        print("0: Create a new entry")
        for i, entry in enumerate(matches, start=1):
            print(f"{i}: Update {entry}")
        choice = choose_index("> ", len(matches) + 1)
    else:
        print("No matching entries found. Create new? (Y/N)")
        if read_line("> ").strip().lower() not in YES_ANSWERS:
            return False
        choice = 0

    if choice == 0:
        added = database.add_entry(create_entry_from_gbook(gbook, owned))
        print(f"Added: {added}")
    else:
        entry: BookEntry = update_entry_from_gbook(matches[choice - 1], gbook)
        if owned:
            entry.owned = True
        database.update_entry(entry)
        print(f"Updated: {entry}")
    return True


def run_sync(gbooks: GBooks, database: Database, *, owned: bool, isbn: bool) -> int:
    while True:
        query = read_line("Enter isbn: " if isbn else "Enter query: ").strip()
        if not query:
            return 0
        if isbn:
            query = isbn_query(query)

        try:
            results = gbooks.search(query)
            if not results:
                print(f"No books found for {query!r}")
                continue
            gbook = pick_book(results)
            if not sync_book(database, gbook, owned):
                return 0
        except ValueError as exc:
            print(f"Error: invalid choice: {exc}", file=sys.stderr)
        except BookSyncError as exc:
            logger.error("Failed to sync %r: %s", query, exc)


def sync(owned: bool, isbn: bool, env_file: Path | None) -> int:
    try:
        settings = load_settings(env_file)
    except BookSyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    gbooks = GBooks(settings.google_books_api_key)
    database = Notion(settings.notion_integration_token).database(
        settings.notion_database_id
    )
    try:
        return run_sync(gbooks, database, owned=owned, isbn=isbn)
    except (EOFError, KeyboardInterrupt):
        print()
        return 0


# ── main ──────────────────────────────────────────────────────────────────


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Convert Google Books descriptions and sync books "
                    "into a Notion library database."
    )
    ap.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    ap_describe = sub.add_parser(
        "describe",
        help="Convert one description and print the fragments as JSON.",
    )
    ap_describe.add_argument(
        "--file",
        type=Path,
        default=None,
        help="File holding the raw description. Reads stdin if omitted.",
    )

    ap_sync = sub.add_parser(
        "sync",
        help="Interactively add or update books in the Notion database.",
    )
    ap_sync.add_argument(
        "--owned",
        action="store_true",
        help="Mark all added or modified books as owned.",
    )
    ap_sync.add_argument(
        "--isbn",
        action="store_true",
        help="Interpret all queries as being an ISBN.",
    )
    ap_sync.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="File with credentials (default: .env in the working directory).",
    )
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "describe":
        if args.file is not None and not args.file.exists():
            print(f"Error: file not found: {args.file}", file=sys.stderr)
            return 1
        return describe(args.file)
    return sync(args.owned, args.isbn, args.env_file)


if __name__ == "__main__":
    sys.exit(main())
