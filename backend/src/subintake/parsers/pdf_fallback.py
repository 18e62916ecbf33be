"""Last-resort PDF text recovery.

Used when a PDF's text layer yields little or nothing. Scans the raw bytes
for ``stream ... endstream`` regions, inflates what it can and collects the
strings shown by the ``TJ`` and ``Tj`` operators. When no shown text is
found it falls back to printable ASCII runs from the raw file.

The scanner never parses the object graph and never raises: the worst
case is an empty string.
"""

import logging
import re
import zlib

logger = logging.getLogger(__name__)

STREAM_MARKER = b"stream"
ENDSTREAM_MARKER = b"endstream"

MIN_ASCII_RUN = 4

# Garbage guard window
GARBAGE_WINDOW = 500
GARBAGE_MARKERS = ("%PDF-", "/DCTDecode", "/FlateDecode")
STREAM_LINE_PATTERN = re.compile(r"(?:^|[\r\n])stream\r?\n")
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
}
_OCTAL_DIGITS = "01234567"


def find_streams(data: bytes) -> list[bytes]:
    """Locate the payload of every ``stream ... endstream`` region."""
    streams: list[bytes] = []
    offset = 0

    while offset < len(data):
        start = data.find(STREAM_MARKER, offset)
        if start == -1:
            break

        payload_start = start + len(STREAM_MARKER)
        if data[payload_start:payload_start + 2] == b"\r\n":
            payload_start += 2
        elif data[payload_start:payload_start + 1] == b"\n":
            payload_start += 1

        end = data.find(ENDSTREAM_MARKER, payload_start)
        if end == -1:
            break

        streams.append(data[payload_start:end])
        offset = end + len(ENDSTREAM_MARKER)

    return streams


def inflate_stream(payload: bytes) -> bytes | None:
    """Inflate a zlib-wrapped stream, retrying as raw deflate.

    Returns None for streams that are neither (images, fonts, plain data).
    """
    try:
        return zlib.decompress(payload)
    except zlib.error:
        pass

    try:
        return zlib.decompress(payload, -zlib.MAX_WBITS)
    except zlib.error:
        return None


def decode_pdf_string(value: str) -> str:
    """Decode backslash escapes in the body of a PDF literal string."""
    decoded: list[str] = []
    i = 0
    length = len(value)

    while i < length:
        ch = value[i]
        if ch != "\\":
            decoded.append(ch)
            i += 1
            continue

        i += 1
        if i >= length:
            break

        nxt = value[i]
        if nxt in _SIMPLE_ESCAPES:
            decoded.append(_SIMPLE_ESCAPES[nxt])
            i += 1
        elif nxt in _OCTAL_DIGITS:
            digits = nxt
            i += 1
            while len(digits) < 3 and i < length and value[i] in _OCTAL_DIGITS:
                digits += value[i]
                i += 1
            decoded.append(chr(int(digits, 8)))
        else:
            decoded.append(nxt)
            i += 1

    return "".join(decoded)


def scan_literal(content: str, start: int) -> tuple[str, int]:
    """Scan a parenthesized string literal starting at ``content[start] == "("``.

    Escaped characters are kept verbatim for ``decode_pdf_string``;
    unescaped parentheses nest. An unterminated literal runs to the end.

    Returns:
        The raw literal body and the index just past the closing parenthesis
    """
    i = start + 1
    depth = 1
    body: list[str] = []
    length = len(content)

    while i < length:
        ch = content[i]
        if ch == "\\":
            body.append(ch)
            if i + 1 < length:
                body.append(content[i + 1])
            i += 2
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return "".join(body), i + 1
        body.append(ch)
        i += 1

    return "".join(body), length


def scan_array(content: str, start: int) -> tuple[list[str], int]:
    """Scan a ``[...]`` array starting at ``content[start] == "["``.

    Only the string literals are collected; kerning numbers and other
    operands are skipped. Brackets inside literals do not close the array.

    Returns:
        The raw literal bodies in order and the index past the closing bracket
    """
    i = start + 1
    depth = 1
    literals: list[str] = []
    length = len(content)

    while i < length:
        ch = content[i]
        if ch == "(":
            body, i = scan_literal(content, i)
            literals.append(body)
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return literals, i + 1
        i += 1

    return literals, length


def _operator_at(content: str, index: int, operator: str) -> bool:
    """Check whether ``operator`` follows ``index`` after optional whitespace."""
    length = len(content)
    while index < length and content[index] in " \t\r\n\f\x00":
        index += 1
    if not content.startswith(operator, index):
        return False
    end = index + len(operator)
    # Operator must end at a delimiter, not run into another token
    return end >= length or not content[end].isalnum()


def extract_shown_text(content: str) -> list[str]:
    """Collect the text shown by ``TJ`` and ``Tj`` operators, in stream order."""
    chunks: list[str] = []
    i = 0
    length = len(content)

    while i < length:
        ch = content[i]
        if ch == "[":
            literals, end = scan_array(content, i)
            if _operator_at(content, end, "TJ"):
                text = "".join(decode_pdf_string(body) for body in literals).strip()
                if text:
                    chunks.append(text)
            i = end
        elif ch == "(":
            body, end = scan_literal(content, i)
            if _operator_at(content, end, "Tj"):
                text = decode_pdf_string(body).strip()
                if text:
                    chunks.append(text)
            i = end
        elif ch == "%":
            # Comment runs to end of line
            newline = content.find("\n", i)
            i = length if newline == -1 else newline + 1
        else:
            i += 1

    return chunks


def extract_ascii_strings(data: bytes, min_length: int = MIN_ASCII_RUN) -> str:
    """Join maximal runs of printable ASCII of at least ``min_length`` bytes."""
    pattern = re.compile(rb"[\x20-\x7e]{%d,}" % min_length)
    return "\n".join(run.decode("ascii") for run in pattern.findall(data))


def extract_pdf_text_fallback(data: bytes) -> str:
    """Recover text from raw PDF bytes without a PDF library.

    Args:
        data: The raw document bytes

    Returns:
        Recovered text, possibly low quality, possibly empty
    """
    try:
        decoded_streams: list[str] = []
        for payload in find_streams(data):
            inflated = inflate_stream(payload)
            if inflated is not None:
                decoded_streams.append(inflated.decode("latin-1"))

        # Tokenize per stream so an unbalanced literal in a binary stream
        # cannot swallow the streams after it
        chunks: list[str] = []
        for content in decoded_streams:
            chunks.extend(extract_shown_text(content))

        logger.debug(
            f"Fallback parser inflated {len(decoded_streams)} streams, "
            f"found {len(chunks)} text chunks"
        )

        if not chunks:
            return extract_ascii_strings(data)

        return "\n".join(chunks)

    except Exception as e:
        logger.warning(f"Fallback PDF parsing failed: {e}")
        return ""


def is_binary_garbage(text: str) -> bool:
    """Check whether recovered text still looks like raw PDF structure.

    Only the first 500 characters are inspected.
    """
    head = text[:GARBAGE_WINDOW]
    if any(marker in head for marker in GARBAGE_MARKERS):
        return True
    if STREAM_LINE_PATTERN.search(head):
        return True
    return bool(CONTROL_CHAR_PATTERN.search(head))


def recover_pdf_text(data: bytes, min_chars: int = 100) -> str:
    """Run the fallback parser and keep its output only if it is usable.

    Args:
        data: The raw document bytes
        min_chars: Output must be longer than this to be accepted

    Returns:
        The recovered text, or an empty string when nothing usable was found
    """
    text = extract_pdf_text_fallback(data)

    if len(text) <= min_chars:
        return ""

    if is_binary_garbage(text):
        logger.warning("Fallback parser returned binary data, discarding text")
        return ""

    return text
