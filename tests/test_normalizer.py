"""Tests for flattening Read API results into text."""

from fakes import read_result
from ocrpro.ocr.normalizer import NormalizedText, normalize_result, page_lines


class TestNormalizeResult:
    """Tests for normalize_result."""

    def test_two_page_document(self) -> None:
        payload = read_result(["Hello", "World"], ["Done"])
        assert normalize_result(payload) == NormalizedText("Hello\nWorld\n\nDone", 2)

    def test_single_page(self) -> None:
        result = normalize_result(read_result(["Invoice #001", "Total: $5.00"]))
        assert result.text == "Invoice #001\nTotal: $5.00"
        assert result.pages == 1

    def test_zero_pages(self) -> None:
        result = normalize_result(read_result())
        assert result.text == ""
        assert result.pages == 0

    def test_none_payload(self) -> None:
        assert normalize_result(None) == NormalizedText("", 0)

    def test_missing_analyze_result(self) -> None:
        assert normalize_result({"status": "succeeded"}) == NormalizedText("", 0)

    def test_page_without_lines_still_counts(self) -> None:
        payload = {"analyzeResult": {"readResults": [{"page": 1}, {"lines": None}]}}
        result = normalize_result(payload)
        assert result.text == ""
        assert result.pages == 2

    def test_malformed_entries_read_as_empty(self) -> None:
        payload = {
            "analyzeResult": {
                "readResults": [
                    None,
                    {"lines": [None, "stray", {"text": "kept"}]},
                    {"lines": "not a list"},
                ]
            }
        }
        result = normalize_result(payload)
        assert result.text == "kept"
        assert result.pages == 3

    def test_read_results_not_a_list(self) -> None:
        payload = {"analyzeResult": {"readResults": {"page": 1}}}
        assert normalize_result(payload) == NormalizedText("", 0)

    def test_strips_surrounding_whitespace(self) -> None:
        result = normalize_result(read_result(["  padded  "], ["tail  "]))
        assert result.text == "padded  \n\ntail"

    def test_is_deterministic(self) -> None:
        payload = read_result(["a", "b"], ["c"])
        assert normalize_result(payload) == normalize_result(payload)

    def test_does_not_mutate_input(self) -> None:
        payload = read_result(["a"])
        snapshot = repr(payload)
        normalize_result(payload)
        assert repr(payload) == snapshot


class TestPageLines:
    """Tests for page_lines."""

    def test_missing_text_becomes_empty_string(self) -> None:
        payload = {"analyzeResult": {"readResults": [{"lines": [{"bbox": []}]}]}}
        assert page_lines(payload) == [[""]]
