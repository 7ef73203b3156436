from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from config import NOTION_API_URL, NOTION_VERSION
from errors import ApiError, BookSyncError, ResponseFormatError
from models import BookEntry, StyledText, TextFragment, TextStyle
from notion import Notion, entry_from_page, properties_from_entry, rich_text_to_block


def make_response(body, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = body
    return response


def make_page(page_id: str = "page1", **overrides) -> dict:
    props = {
        "Name": {"title": [{"plain_text": "Dune"}]},
        "Authors": {"multi_select": [{"id": "a1", "name": "Frank Herbert"}]},
        "Publisher": {"select": {"id": "p1", "name": "Chilton"}},
        "Ownership": {"select": {"name": "Own"}},
        "Publish Date": {"rich_text": [{"plain_text": "1965"}]},
        "ISBN": {"rich_text": []},
    }
    props.update(overrides)
    return {
        "id": page_id,
        "cover": {"external": {"url": "http://img/dune.jpg"}},
        "properties": props,
    }


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


# ── payloads ──────────────────────────────────────────────────────────────


def test_rich_text_block_has_one_run_per_fragment() -> None:
    styled = StyledText([
        TextFragment("A "),
        TextFragment("bold", TextStyle(bold=True)),
        TextFragment(".\nNext", TextStyle(italic=True)),
    ])
    block = rich_text_to_block(styled)

    assert block["object"] == "block"
    assert block["type"] == "paragraph"
    runs = block["paragraph"]["rich_text"]
    assert [r["text"]["content"] for r in runs] == ["A ", "bold", ".\nNext"]
    assert runs[1]["annotations"] == {"bold": True, "italic": False}
    assert runs[2]["annotations"] == {"bold": False, "italic": True}
    assert all(r["type"] == "text" for r in runs)


def test_properties_from_full_entry() -> None:
    entry = BookEntry(
        title="Dune",
        owned=True,
        authors=["Frank Herbert", "New Author"],
        author_ids=["a1", None],
        publisher="Chilton, Inc.",
        publisher_id="p1",
        published_date="1965",
        isbn="9780441013593",
    )
    props = properties_from_entry(entry)

    assert props["Type"] == {"select": {"name": "Book"}}
    assert props["Name"] == {"title": [{"text": {"content": "Dune"}}]}
    assert props["Ownership"] == {"select": {"name": "Own"}}
    assert props["Authors"] == {"multi_select": [
        {"id": "a1", "name": "Frank Herbert"},
        {"name": "New Author"},
    ]}
    assert props["Publisher"] == {"select": {"id": "p1", "name": "Chilton Inc."}}
    assert props["Publish Date"] == {"rich_text": [{"text": {"content": "1965"}}]}
    assert props["ISBN"] == {"rich_text": [{"text": {"content": "9780441013593"}}]}


def test_properties_leave_out_empty_fields() -> None:
    props = properties_from_entry(BookEntry(title="Bare"))
    assert set(props) == {"Type", "Name"}


def test_properties_tolerate_missing_author_ids() -> None:
    props = properties_from_entry(BookEntry(title="T", authors=["A"]))
    assert props["Authors"] == {"multi_select": [{"name": "A"}]}


# ── page parsing ──────────────────────────────────────────────────────────


def test_entry_from_page() -> None:
    entry = entry_from_page(make_page())
    assert entry.id == "page1"
    assert entry.title == "Dune"
    assert entry.owned is True
    assert entry.authors == ["Frank Herbert"]
    assert entry.author_ids == ["a1"]
    assert entry.publisher == "Chilton"
    assert entry.publisher_id == "p1"
    assert entry.published_date == "1965"
    assert entry.isbn is None
    assert entry.cover_url == "http://img/dune.jpg"
    assert entry.had_original_description is False


def test_entry_from_page_with_empty_selects() -> None:
    page = make_page(Publisher={"select": None}, Ownership={"select": None})
    page["cover"] = None
    entry = entry_from_page(page)
    assert entry.publisher is None
    assert entry.owned is False
    assert entry.cover_url is None


def test_entry_from_malformed_page_raises() -> None:
    with pytest.raises(ResponseFormatError):
        entry_from_page({"id": "x", "properties": {}})


# ── client ────────────────────────────────────────────────────────────────


def test_request_sends_auth_headers(session) -> None:
    session.request.return_value = make_response({"ok": 1})
    assert Notion("tok", session=session).request("GET", "/users/me") == {"ok": 1}

    args, kwargs = session.request.call_args
    assert args == ("GET", f"{NOTION_API_URL}/users/me")
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["headers"]["Notion-Version"] == NOTION_VERSION


def test_request_error_status_raises(session) -> None:
    session.request.return_value = make_response(
        {"object": "error", "message": "Unauthorized"}, status=401,
    )
    with pytest.raises(ApiError) as excinfo:
        Notion("tok", session=session).request("GET", "/users/me")
    assert excinfo.value.status == 401
    assert "Unauthorized" in str(excinfo.value)


def test_search_marks_pages_with_body(session) -> None:
    session.request.side_effect = [
        make_response({"results": [make_page("p1"), make_page("p2")]}),
        make_response({"results": [{"object": "block"}]}),
        make_response({"results": []}),
    ]
    db = Notion("tok", session=session).database("db1")
    entries = db.search("Dune")

    assert [e.had_original_description for e in entries] == [True, False]
    query_call = session.request.call_args_list[0]
    assert query_call.args == ("POST", f"{NOTION_API_URL}/databases/db1/query")
    assert query_call.kwargs["json"]["filter"]["and"][0]["title"] == {"contains": "Dune"}
    assert session.request.call_args_list[1].args[1].endswith("/blocks/p1/children")


def test_search_without_results_array_raises(session) -> None:
    session.request.return_value = make_response({"object": "list"})
    with pytest.raises(ResponseFormatError):
        Notion("tok", session=session).database("db1").search("x")


def test_add_entry_sets_cover_and_description(session) -> None:
    session.request.side_effect = [
        make_response(make_page("new1")),
        make_response({"results": []}),
    ]
    styled = StyledText([TextFragment("Desc.")])
    entry = BookEntry(title="Dune", cover_url="http://img/dune.jpg", description=styled)

    added = Notion("tok", session=session).database("db1").add_entry(entry)

    assert added.id == "new1"
    create_call, children_call = session.request.call_args_list
    body = create_call.kwargs["json"]
    assert body["parent"] == {"database_id": "db1"}
    assert body["cover"] == {"external": {"url": "http://img/dune.jpg"}}
    assert children_call.args == ("PATCH", f"{NOTION_API_URL}/blocks/new1/children")
    assert children_call.kwargs["json"] == {"children": [rich_text_to_block(styled)]}


def test_add_entry_without_description_makes_one_call(session) -> None:
    session.request.return_value = make_response(make_page("new1"))
    Notion("tok", session=session).database("db1").add_entry(BookEntry(title="Dune"))
    assert session.request.call_count == 1


def test_update_entry_keeps_existing_body(session) -> None:
    session.request.return_value = make_response({})
    entry = BookEntry(
        id="page1",
        title="Dune",
        description=StyledText([TextFragment("x")]),
        had_original_description=True,
    )
    Notion("tok", session=session).database("db1").update_entry(entry)

    assert session.request.call_count == 1
    assert session.request.call_args.args == ("PATCH", f"{NOTION_API_URL}/pages/page1")


def test_update_entry_writes_missing_body(session) -> None:
    session.request.return_value = make_response({})
    entry = BookEntry(id="page1", title="Dune", description=StyledText([TextFragment("x")]))
    Notion("tok", session=session).database("db1").update_entry(entry)

    assert session.request.call_count == 2
    assert session.request.call_args.args[1].endswith("/blocks/page1/children")


def test_update_entry_requires_id(session) -> None:
    with pytest.raises(BookSyncError):
        Notion("tok", session=session).database("db1").update_entry(BookEntry(title="x"))
