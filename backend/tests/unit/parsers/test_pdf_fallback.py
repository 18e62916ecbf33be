"""Unit tests for the fallback PDF text parser.

PDFs are built in memory with zlib-compressed content streams.

Run with: pytest backend/tests/unit/parsers/test_pdf_fallback.py -v
"""

import zlib

import pytest

from subintake.parsers.pdf_fallback import (
    decode_pdf_string,
    extract_ascii_strings,
    extract_pdf_text_fallback,
    extract_shown_text,
    find_streams,
    inflate_stream,
    is_binary_garbage,
    recover_pdf_text,
    scan_array,
    scan_literal,
)

LETTERHEAD = (
    b"BT /F1 12 Tf 72 720 Td (Acme Electric LLC) Tj\n"
    b"0 -14 Td [(Contact: ) -250 (John Smith)] TJ\n"
    b"0 -14 Td (john.smith@acme.com  \\(555\\) 123-4567) Tj\n"
    b"0 -14 Td (Scope of Work: electrical installation for the new wing) Tj ET"
)


class TestStreamLocation:
    """Tests for finding and inflating content streams."""

    def test_finds_stream_payloads(self):
        """Test that each stream payload is returned without the EOL."""
        data = b"1 0 obj\nstream\r\nABC endstream\n2 0 obj\nstream\nXYZ endstream"
        assert find_streams(data) == [b"ABC ", b"XYZ "]

    def test_unterminated_stream_is_ignored(self):
        """Test that a stream without endstream yields nothing."""
        assert find_streams(b"stream\nno end here") == []

    def test_inflates_zlib_and_raw_deflate(self):
        """Test both zlib-wrapped and raw deflate payloads."""
        assert inflate_stream(zlib.compress(b"hello")) == b"hello"

        compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
        raw = compressor.compress(b"raw deflate") + compressor.flush()
        assert inflate_stream(raw) == b"raw deflate"

    def test_uncompressed_payload_returns_none(self):
        """Test that non-deflate data is skipped."""
        assert inflate_stream(b"\xff\xd8\xff\xe0 jpeg bytes") is None


class TestStringDecoding:
    """Tests for PDF literal string scanning and escapes."""

    def test_simple_escapes(self):
        """Test newline, tab and escaped delimiters."""
        assert decode_pdf_string(r"a\nb\tc") == "a\nb\tc"
        assert decode_pdf_string(r"\(x\)\\") == "(x)\\"

    def test_octal_escapes(self):
        """Test 1-3 digit octal escapes."""
        assert decode_pdf_string(r"caf\351") == "café"
        assert decode_pdf_string(r"\101BC") == "ABC"
        assert decode_pdf_string(r"\7") == "\x07"

    def test_unknown_escape_keeps_character(self):
        """Test that an unknown escape yields the escaped character."""
        assert decode_pdf_string(r"\q") == "q"

    def test_nested_parentheses(self):
        """Test that balanced parentheses nest inside a literal."""
        body, end = scan_literal("(outer (inner) text) Tj", 0)
        assert body == "outer (inner) text"
        assert end == len("(outer (inner) text)")

    def test_escaped_parenthesis_does_not_close(self):
        """Test that escaped parentheses are kept for decoding."""
        body, _ = scan_literal(r"(a\) b) Tj", 0)
        assert body == r"a\) b"
        assert decode_pdf_string(body) == "a) b"

    def test_unterminated_literal_runs_to_end(self):
        """Test that an unclosed literal consumes the rest of the content."""
        body, end = scan_literal("(never closed", 0)
        assert body == "never closed"
        assert end == len("(never closed")

    def test_array_collects_literals(self):
        """Test that kerning numbers are skipped and brackets in strings ignored."""
        literals, end = scan_array("[(Hel) -20 (lo [x]) 15 (!)] TJ", 0)
        assert literals == ["Hel", "lo [x]", "!"]
        assert end == len("[(Hel) -20 (lo [x]) 15 (!)]")


class TestShownText:
    """Tests for collecting TJ/Tj text."""

    def test_collects_in_stream_order(self):
        """Test that Tj and TJ chunks keep their relative order."""
        content = "(First) Tj [(Sec) 10 (ond)] TJ (Third) Tj"
        assert extract_shown_text(content) == ["First", "Second", "Third"]

    def test_ignores_literals_without_show_operator(self):
        """Test that strings used by other operators are skipped."""
        content = "/Title (Not shown) def (Shown) Tj [(also not)] BDC"
        assert extract_shown_text(content) == ["Shown"]

    def test_skips_comments(self):
        """Test that a comment line cannot start a literal."""
        content = "% (commented) Tj\n(Visible) Tj"
        assert extract_shown_text(content) == ["Visible"]

    def test_blank_chunks_dropped(self):
        """Test that whitespace-only strings are not emitted."""
        assert extract_shown_text("(   ) Tj (x) Tj") == ["x"]


class TestFallbackExtraction:
    """Tests for whole-document fallback extraction."""

    def test_recovers_text_from_compressed_streams(self, pdf_builder):
        """Test extraction from a FlateDecode content stream."""
        text = extract_pdf_text_fallback(pdf_builder(LETTERHEAD))

        lines = text.split("\n")
        assert lines[0] == "Acme Electric LLC"
        assert lines[1] == "Contact: John Smith"
        assert lines[2] == "john.smith@acme.com  (555) 123-4567"

    def test_streams_are_tokenized_independently(self, pdf_builder):
        """Test that an unbalanced literal in one stream does not hide the next."""
        broken = b"(unterminated literal Tj"
        text = extract_pdf_text_fallback(pdf_builder(broken, b"(Next stream) Tj"))
        assert "Next stream" in text

    def test_falls_back_to_ascii_runs(self):
        """Test ASCII recovery when no stream shows text."""
        data = b"\x00\x01Hello World text\x00\x02ab\x00Second run here\xff"
        text = extract_pdf_text_fallback(data)
        assert text == "Hello World text\nSecond run here"

    def test_ascii_min_length(self):
        """Test that short printable runs are dropped."""
        assert extract_ascii_strings(b"abc\x00abcd\x00") == "abcd"

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"stream",
            b"stream\nendstream",
            b"stream\n(((( Tj endstream",
            b"stream\n" + zlib.compress(b"[(a) (b") + b"endstream",
            b"stream\n" + zlib.compress(b"(\\") + b"endstream",
            bytes(range(256)) * 4,
        ],
    )
    def test_never_raises(self, data):
        """Test that arbitrary bytes always produce a string."""
        assert isinstance(extract_pdf_text_fallback(data), str)


class TestGarbageGuard:
    """Tests for rejecting recovered text that is still raw PDF."""

    def test_detects_pdf_markers(self):
        """Test header and filter markers."""
        assert is_binary_garbage("%PDF-1.7\n1 0 obj")
        assert is_binary_garbage("<< /Filter /FlateDecode >>")
        assert is_binary_garbage("obj\nstream\nxyz")

    def test_detects_control_characters(self):
        """Test that control characters mark the text as binary."""
        assert is_binary_garbage("abc\x01def")

    def test_clean_text_passes(self):
        """Test that normal text, including tabs and newlines, is accepted."""
        assert not is_binary_garbage("Acme Electric LLC\n\tContact: John Smith\r\n")

    def test_only_inspects_leading_window(self):
        """Test that markers after the first 500 characters are not seen."""
        assert not is_binary_garbage("x" * 500 + "%PDF-1.4")

    def test_recover_accepts_long_clean_text(self, pdf_builder):
        """Test that recovered text over the threshold is kept."""
        text = recover_pdf_text(pdf_builder(LETTERHEAD))
        assert text.startswith("Acme Electric LLC")
        assert len(text) > 100

    def test_recover_rejects_short_text(self, pdf_builder):
        """Test that text at or under the threshold is discarded."""
        assert recover_pdf_text(pdf_builder(b"(Too short) Tj")) == ""

    def test_recover_rejects_raw_pdf_structure(self):
        """Test that ASCII runs beginning with the PDF header are discarded."""
        data = b"%PDF-1.4\n" + b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n" * 5
        assert recover_pdf_text(data) == ""
