from __future__ import annotations

import pytest

from config import TagType
from models import BookEntry, StyledText, TextFragment, TextStyle


def test_with_tag_sets_one_attribute() -> None:
    assert TextStyle().with_tag(TagType.BOLD) == TextStyle(bold=True)
    assert TextStyle(bold=True).with_tag(TagType.ITALIC) == TextStyle(bold=True, italic=True)


def test_with_tag_rejects_structural_tags() -> None:
    with pytest.raises(ValueError):
        TextStyle().with_tag(TagType.LINEBREAK)


def test_styled_text_to_list() -> None:
    styled = StyledText([
        TextFragment("a "),
        TextFragment("b", TextStyle(bold=True, italic=True)),
    ])
    assert styled.to_list() == [
        {"text": "a ", "bold": False, "italic": False},
        {"text": "b", "bold": True, "italic": True},
    ]
    assert styled.plain_text == "a b"
    assert len(styled) == 2


def test_entry_str_with_all_parts() -> None:
    entry = BookEntry(
        title="Dune",
        authors=["Frank Herbert"],
        publisher="Chilton",
        published_date="1965",
        isbn="9780441013593",
    )
    assert str(entry) == "Dune by Frank Herbert (Chilton, 1965) (9780441013593)"


def test_entry_str_omits_missing_parts() -> None:
    entry = BookEntry(title="Anon", authors=["A", "B"], published_date="2001")
    assert str(entry) == "Anon by A, B (2001)"
