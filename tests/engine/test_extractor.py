from __future__ import annotations

import pytest

from live_checker.engine.extractor import extract_id, extract_ids, split_lines


@pytest.mark.parametrize(
    "line, expected",
    [
        ("100012345678901", "10001234567890"),
        ("10001234567890", "10001234567890"),
        ("user_10001234567890", "10001234567890"),
        ("https://x.com/10001234567890", "10001234567890"),
        ("2024/05/01 https://x.com/10001234567890?ref=7", "10001234567890"),
    ],
)
def test_extract_id_finds_embedded_identifier(line: str, expected: str) -> None:
    assert extract_id(line) == expected


def test_extract_id_prefers_first_exact_length_run() -> None:
    line = "123456789012345678 11111111111111 22222222222222"
    assert extract_id(line) == "11111111111111"


def test_extract_id_truncates_longest_run_when_no_exact_match() -> None:
    line = "a1234567890123 b999999999999999999"
    assert extract_id(line) == "99999999999999"


def test_extract_id_takes_first_of_equal_longest_runs() -> None:
    assert extract_id("111111111111111 222222222222222") == "11111111111111"


@pytest.mark.parametrize("line", ["", "abc", "12345", "1234567890123 1234567890123", "user-12-34"])
def test_extract_id_returns_none_for_short_runs(line: str) -> None:
    assert extract_id(line) is None


def test_extract_id_ignores_non_ascii_digits() -> None:
    # Fullwidth digits are not identifier characters.
    assert extract_id("１２３４５６７８９０１２３４") is None


def test_extracted_ids_are_fourteen_ascii_digits() -> None:
    for line in ("x100012345678901y", "u_10001234567890", "9" * 30):
        value = extract_id(line)
        assert value is not None
        assert len(value) == 14 and value.isascii() and value.isdigit()


def test_split_lines_strips_blank_lines_and_caps() -> None:
    text = "  a \n\n b\n   \nc\nd\n"
    lines = split_lines(text, max_lines=3)
    assert lines.lines == ("a", "b", "c")
    assert lines.dropped == 1
    assert lines.truncated

    uncapped = split_lines(text)
    assert uncapped.lines == ("a", "b", "c", "d")
    assert not uncapped.truncated


def test_extract_ids_yields_one_candidate_per_line() -> None:
    assert list(extract_ids(["abc", "id 10001234567890"])) == [None, "10001234567890"]


def test_split_lines_breaks_only_on_newline() -> None:
    lines = split_lines("abc\x0c10001234567890\x1cxyz\r11111111111111")
    assert len(lines.lines) == 1
    assert list(extract_ids(lines.lines)) == ["10001234567890"]


def test_split_lines_trims_windows_line_endings() -> None:
    assert split_lines("10001234567890\r\n11111111111111\r\n").lines == ("10001234567890", "11111111111111")
