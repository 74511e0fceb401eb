"""Tests for token scanning, stripping, insertion and incremental rescans."""

import pytest

from sidecards.sync.token_scanner import (
    TextEdit,
    TokenScanner,
    insert_token,
    referenced_ids,
    scan_tokens,
    strip_tokens,
)


def _spans(occurrences):
    return [(o.start, o.end, o.record_id) for o in occurrences]


def _edit(text: str, start: int, remove: int, inserted: str) -> tuple[str, TextEdit]:
    """Apply a replacement and describe it as a TextEdit."""
    removed = text[start : start + remove]
    new_text = text[:start] + inserted + text[start + remove :]
    return new_text, TextEdit(start=start, removed=removed, inserted=inserted)


LONG_DOCUMENT = (
    "Intro line with &aaaaaa in it.\n"
    + "filler words " * 10
    + "middle &bbbbbb and (&cccccc).\n"
    + "more filler " * 10
    + "closing &dddddd"
)


class TestScanTokens:
    """Token grammar."""

    def test_finds_tokens_in_order(self) -> None:
        occurrences = scan_tokens("See &abc123 and &XYZ789.", "notes/a.md")

        assert _spans(occurrences) == [(4, 11, "abc123"), (16, 23, "XYZ789")]
        assert all(o.document_path == "notes/a.md" for o in occurrences)

    @pytest.mark.parametrize(
        "text",
        [
            "&abc1234",
            "x&abc123",
            "&abc123&def456",
            "&&abc123",
            "&abc12",
            "&abc-12",
        ],
    )
    def test_malformed_tokens_do_not_match(self, text: str) -> None:
        assert scan_tokens(text) == []

    @pytest.mark.parametrize(
        "text",
        ["&abc123", "(&abc123)", "&abc123.", "line\n&abc123\nline", "\t&abc123,"],
    )
    def test_punctuation_and_whitespace_are_boundaries(self, text: str) -> None:
        assert [o.record_id for o in scan_tokens(text)] == ["abc123"]

    def test_ids_are_case_sensitive(self) -> None:
        assert referenced_ids("&abcdef &ABCDEF") == ["abcdef", "ABCDEF"]

    def test_referenced_ids_deduplicates_in_first_occurrence_order(self) -> None:
        assert referenced_ids("&bbbbbb &aaaaaa &bbbbbb") == ["bbbbbb", "aaaaaa"]

    def test_scan_is_restartable(self) -> None:
        text = "one &aaaaaa two &bbbbbb"
        assert _spans(scan_tokens(text)) == _spans(scan_tokens(text))


class TestStripAndInsert:
    """Text rewriting helpers."""

    def test_strip_removes_only_matching_tokens(self) -> None:
        new_text, removed = strip_tokens(
            "a &abc123 b &def456 c", lambda record_id: record_id == "abc123"
        )

        assert new_text == "a  b &def456 c"
        assert removed == ["abc123"]

    def test_strip_leaves_malformed_tokens(self) -> None:
        new_text, removed = strip_tokens("&abc1234 &abc123", lambda _: True)

        assert new_text == "&abc1234 "
        assert removed == ["abc123"]

    def test_strip_reports_every_occurrence(self) -> None:
        new_text, removed = strip_tokens("&aaaaaa x &aaaaaa", lambda _: True)

        assert new_text == " x "
        assert removed == ["aaaaaa", "aaaaaa"]

    def test_strip_without_matches_returns_same_text(self) -> None:
        text = "nothing &abc123 here"
        assert strip_tokens(text, lambda _: False) == (text, [])

    def test_insert_adds_leading_space(self) -> None:
        assert insert_token("Hello world", 5, "abc123") == "Hello &abc123 world"
        assert insert_token("Hello", 5, "abc123") == "Hello &abc123"

    def test_insert_separates_following_word(self) -> None:
        new_text = insert_token("Helloworld", 5, "abc123")

        assert new_text == "Hello &abc123 world"
        assert referenced_ids(new_text) == ["abc123"]

    def test_insert_out_of_range_raises(self) -> None:
        with pytest.raises(ValueError):
            insert_token("abc", 4, "abc123")


class TestTokenScannerCache:
    """Content-hash keyed cache."""

    def test_same_text_hits_cache(self, scanner: TokenScanner) -> None:
        first = scanner.scan("x &abc123", "a.md")
        second = scanner.scan("x &abc123", "b.md")

        assert scanner.misses == 1
        assert scanner.hits == 1
        assert first.content_hash == second.content_hash
        assert second.occurrences[0].document_path == "b.md"

    def test_changed_text_is_rescanned(self, scanner: TokenScanner) -> None:
        scanner.scan("x &abc123")
        result = scanner.scan("x &abc123 &def456")

        assert scanner.misses == 2
        assert result.ids == ["abc123", "def456"]

    def test_cache_is_bounded(self) -> None:
        scanner = TokenScanner(cache_size=1)
        scanner.scan("one")
        scanner.scan("two")
        scanner.scan("one")

        assert scanner.misses == 3

    def test_margin_must_cover_token_boundaries(self) -> None:
        with pytest.raises(ValueError):
            TokenScanner(margin=4)


class TestIncrementalRescan:
    """rescan_edit must always agree with a full scan."""

    @pytest.mark.parametrize(
        ("start", "remove", "inserted"),
        [
            (5, 0, " &eeeeee "),  # new token near the start
            (len(LONG_DOCUMENT), 0, " &ffffff"),  # append at the end
            (17, 1, ""),  # shorten &aaaaaa to five characters
            (22, 0, "9"),  # lengthen &aaaaaa to seven characters
            (40, 5, "XY"),  # edit between tokens, later tokens shift
            (0, 4, ""),  # delete at the very start
        ],
    )
    def test_single_line_edits_match_full_scan(
        self, scanner: TokenScanner, start: int, remove: int, inserted: str
    ) -> None:
        previous = scanner.scan(LONG_DOCUMENT, "doc.md")
        new_text, edit = _edit(LONG_DOCUMENT, start, remove, inserted)

        result = scanner.rescan_edit(previous, new_text, edit)

        assert _spans(result.occurrences) == _spans(scan_tokens(new_text))
        assert result.document_path == "doc.md"

    def test_splitting_adjacent_tokens_creates_both(self, scanner: TokenScanner) -> None:
        text = "see &abc123&def456 now"
        previous = scanner.scan(text)
        new_text, edit = _edit(text, 11, 0, " ")

        result = scanner.rescan_edit(previous, new_text, edit)

        assert result.ids == ["abc123", "def456"]
        assert _spans(result.occurrences) == _spans(scan_tokens(new_text))

    def test_multiline_paste_falls_back_to_full_scan(self, scanner: TokenScanner) -> None:
        previous = scanner.scan(LONG_DOCUMENT)
        new_text, edit = _edit(LONG_DOCUMENT, 30, 0, "\npasted &gggggg\nlines\n")

        result = scanner.rescan_edit(previous, new_text, edit)

        assert _spans(result.occurrences) == _spans(scan_tokens(new_text))
        assert "gggggg" in result.ids

    def test_stale_previous_result_falls_back(self, scanner: TokenScanner) -> None:
        previous = scanner.scan("unrelated &zzzzzz text")
        new_text, edit = _edit(LONG_DOCUMENT, 10, 0, "abc")

        result = scanner.rescan_edit(previous, new_text, edit)

        assert _spans(result.occurrences) == _spans(scan_tokens(new_text))
        assert "zzzzzz" not in result.ids

    def test_out_of_range_edit_falls_back(self, scanner: TokenScanner) -> None:
        previous = scanner.scan("short &abc123")
        edit = TextEdit(start=500, removed="", inserted="x")

        result = scanner.rescan_edit(previous, "short &abc123 x", edit)

        assert result.ids == ["abc123"]

    def test_sequence_of_edits_stays_consistent(self, scanner: TokenScanner) -> None:
        text = LONG_DOCUMENT
        result = scanner.scan(text)
        for start, remove, inserted in [(3, 0, "&hhhhhh "), (60, 2, ""), (100, 0, " &iiiiii")]:
            text, edit = _edit(text, start, remove, inserted)
            result = scanner.rescan_edit(result, text, edit)

        assert _spans(result.occurrences) == _spans(scan_tokens(text))
