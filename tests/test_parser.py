from __future__ import annotations

import pytest

from models import Item, PriceRange
from parser import (
    contains_trigger,
    flatten_message,
    normalize_line,
    parse_date,
    parse_estimated_price,
    parse_items,
    parse_quest_text,
    parse_role_day,
    split_lines,
    truncate,
)


# -----------------------------
# Flattening
# -----------------------------
def test_flatten_orders_content_then_embed_parts(message):
    msg = message(
        content="hello",
        embeds=[
            {
                "title": "T1",
                "description": "D1",
                "fields": [
                    {"name": "N1", "value": "V1"},
                    {"name": "N2", "value": "V2"},
                ],
                "footer": {"text": "F1"},
            },
            {"title": "T2", "footer": {"text": "F2"}},
        ],
    )
    assert flatten_message(msg) == "hello\nT1\nD1\nN1\nV1\nN2\nV2\nF1\nT2\nF2"


def test_flatten_skips_missing_parts_and_trims(message):
    msg = message(content=None, embeds=[{"description": "  only description  "}])
    assert flatten_message(msg) == "only description"


def test_flatten_empty_message(message):
    assert flatten_message(message(content=None)) == ""


def test_flatten_is_deterministic(message):
    msg = message(content="a", embeds=[{"title": "b", "fields": [{"name": "c", "value": "d"}]}])
    assert flatten_message(msg) == flatten_message(msg)


@pytest.mark.parametrize(
    "text",
    ["Today's DAILY QUEST", "daily quest", "...the Daily Quest is up"],
)
def test_contains_trigger_is_case_insensitive(text):
    assert contains_trigger(text, ("daily quest",))


def test_contains_trigger_misses():
    assert not contains_trigger("weekly quest", ("daily quest",))
    assert not contains_trigger("", ("daily quest",))
    assert not contains_trigger(None, ("daily quest",))
    assert not contains_trigger("anything", ("  ", ""))


# -----------------------------
# Normalization
# -----------------------------
def test_normalize_line_cleans_markdown_and_dashes():
    assert normalize_line("**Estimated Final Price:** 18–20") == "Estimated Final Price: 18-20"
    assert normalize_line("•  200   Shallot Mustache") == "200 Shallot Mustache"
    assert normalize_line("Today’s Date:\u200b 09 August 2025") == "Today's Date: 09 August 2025"
    assert normalize_line(None) == ""


def test_split_lines_drops_blank_lines():
    assert split_lines("a\n\n  \r\nb") == ["a", "b"]
    assert split_lines(None) == []


def test_truncate():
    assert truncate("x" * 1500, 1000) == "x" * 1000
    assert truncate(None, 10) == ""


# -----------------------------
# Field rules
# -----------------------------
def test_date_from_labeled_line():
    assert parse_date(["Today's Date: 09 August 2025"]) == "09 August 2025"


def test_date_labeled_wins_over_freeform():
    lines = ["Posted 01 July 2025", "Date: Saturday, 9 Aug"]
    assert parse_date(lines) == "Saturday, 9 Aug"


def test_date_freeform():
    assert parse_date(["Daily Quest 9 August 2025 is live"]) == "9 August 2025"
    assert parse_date(["12 Sept 2025"]) == "12 Sept 2025"


def test_date_ignores_item_lines():
    assert parse_date(["200 Shallot Mustache for 13 World Locks"]) is None


def test_date_month_must_be_a_month_name():
    assert parse_date(["12 Seeds 2025"]) is None
    assert parse_date(["09 Agustus 2025"]) is None
    assert parse_date(["Date: 09 Agustus 2025"]) == "09 Agustus 2025"


def test_role_day():
    assert parse_role_day(["Role Day: Chef"]) == "Chef"
    assert parse_role_day(["role day:   Fisher (bonus)"]) == "Fisher"
    assert parse_role_day(["Role Day:"]) is None


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Estimated Final Price: 18-20", PriceRange(18, 20)),
        ("Estimated Final Price: 18 - 20 WL", PriceRange(18, 20)),
        ("Estimated Final Price: 18 to 20", PriceRange(18, 20)),
        ("Estimated Final Price: 25", PriceRange(25, 25)),
        ("Estimated Final Price: 20-18", PriceRange(18, 20)),
    ],
)
def test_estimated_price(line, expected):
    assert parse_estimated_price([line]) == expected


def test_estimated_price_handles_en_dash_after_normalization():
    assert parse_estimated_price(split_lines("Estimated Final Price: 18—20")) == PriceRange(18, 20)


def test_estimated_price_missing():
    assert parse_estimated_price(["Estimated Final Price: TBA"]) is None
    assert parse_estimated_price([]) is None


def test_item_primary_pattern():
    items = parse_items(["200 Shallot Mustache for 13 World Locks"])
    assert items == [Item(name="Shallot Mustache", qty=200, price_wl=13)]


def test_item_primary_accepts_singular_and_case():
    items = parse_items(["1 Magic Egg FOR 1 world lock"])
    assert items == [Item(name="Magic Egg", qty=1, price_wl=1)]


def test_items_keep_line_order():
    items = parse_items(
        [
            "Role Day: Chef",
            "200 Shallot Mustache for 13 World Locks",
            "23 Steam Collector Seed for 7 World Locks",
        ]
    )
    assert [i.name for i in items] == ["Shallot Mustache", "Steam Collector Seed"]


def test_item_with_zero_quantity_is_dropped():
    assert parse_items(["0 Shallot Mustache for 13 World Locks"]) == []


def test_fallback_pattern_used_when_primary_finds_nothing():
    items = parse_items(split_lines("23 Steam Collector Seed – 7 WL\n5 Dirt - 1 WL"))
    assert items == [
        Item(name="Steam Collector Seed", qty=23, price_wl=7),
        Item(name="Dirt", qty=5, price_wl=1),
    ]


def test_fallback_not_mixed_with_primary_results():
    items = parse_items(
        [
            "200 Shallot Mustache for 13 World Locks",
            "23 Steam Collector Seed - 7 WL",
        ]
    )
    assert items == [Item(name="Shallot Mustache", qty=200, price_wl=13)]


def test_unrecognized_lines_are_ignored():
    assert parse_items(["hello", "Estimated Final Price: 18-20", ""]) == []


# -----------------------------
# Whole text
# -----------------------------
def test_parse_quest_text(dq_post):
    fields = parse_quest_text(dq_post)
    assert fields["date"] == "09 August 2025"
    assert fields["role_day"] == "Chef"
    assert fields["estimated_final_price"] == PriceRange(18, 20)
    assert fields["items"] == [
        Item(name="Shallot Mustache", qty=200, price_wl=13),
        Item(name="Steam Collector Seed", qty=23, price_wl=7),
    ]


@pytest.mark.parametrize("text", ["", None, "nothing useful here\n???"])
def test_parse_quest_text_never_raises(text):
    fields = parse_quest_text(text)
    assert fields == {
        "date": None,
        "role_day": None,
        "estimated_final_price": None,
        "items": [],
    }


@pytest.mark.parametrize(
    "text",
    ["**Daily** Quest", "Daily\u200b Quest", "__Daily__   QUEST", "`daily`  quest", "Daily\n**Quest**"],
)
def test_contains_trigger_sees_through_markdown(text):
    assert contains_trigger(text, ("daily quest",))
