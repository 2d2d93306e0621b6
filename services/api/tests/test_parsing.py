"""Unit tests for model output parsing helpers (no network calls)."""

from wordapi.services.providers.parsing import extract_first_json_array, normalize_items, parse_categories


def test_extract_first_json_array_direct() -> None:
    payload = extract_first_json_array('[{"categoryName": "a", "words": ["x"]}]')
    assert isinstance(payload, list)
    assert payload[0]["categoryName"] == "a"


def test_extract_first_json_array_embedded() -> None:
    text = 'some preface\n[ {"categoryName": "Birds", "words": ["owl", "crow"]} ]\ntrailing [not json'
    payload = extract_first_json_array(text)
    assert isinstance(payload, list)
    assert payload[0]["words"] == ["owl", "crow"]


def test_extract_skips_malformed_bracket_before_real_array() -> None:
    text = "Note [1] below.\n" 'Answer: [{"categoryName": "Fish", "words": ["cod"]}]'
    payload = extract_first_json_array(text)
    # "[1]" is itself a well-formed array, so it wins.
    assert payload == [1]

    text = "See [this] list: " '[{"categoryName": "Fish", "words": ["cod"]}]'
    payload = extract_first_json_array(text)
    assert payload == [{"categoryName": "Fish", "words": ["cod"]}]


def test_extract_finds_array_inside_object() -> None:
    text = '{"categories": [{"categoryName": "Trees", "words": ["oak"]}]}'
    assert extract_first_json_array(text) == [{"categoryName": "Trees", "words": ["oak"]}]


def test_extract_returns_none_without_array() -> None:
    assert extract_first_json_array("") is None
    assert extract_first_json_array("no json here") is None
    assert extract_first_json_array('{"ok": true}') is None


def test_normalize_coerces_and_truncates() -> None:
    payload = [
        {"categoryName": 2024, "words": list(range(30))},
        {"category_name": "  Spaced  ", "words": ["a", None, "", "b"]},
    ]
    drafts = normalize_items(payload, source_tag="openai")

    assert drafts[0].category_name == "2024"
    assert len(drafts[0].words) == 20
    assert drafts[0].words[0] == "0"
    assert drafts[1].category_name == "Spaced"
    assert drafts[1].words == ["a", "b"]
    assert {d.source_tag for d in drafts} == {"openai"}


def test_normalize_drops_unusable_items() -> None:
    payload = [
        "just a string",
        {"categoryName": "", "words": ["a"]},
        {"categoryName": "No words", "words": []},
        {"categoryName": "Bad words", "words": "a, b, c"},
        {"words": ["missing name"]},
        {"name": "Kept", "words": ["x"], "extra": 1},
    ]
    drafts = normalize_items(payload, source_tag="gemini")

    assert [d.category_name for d in drafts] == ["Kept"]


def test_parse_categories_empty_on_garbage() -> None:
    assert parse_categories("```json\n[oops\n```", source_tag="anthropic") == []
