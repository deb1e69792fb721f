"""Delimited-text parsing for donation exports."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

QUOTE = '"'


def _is_blank_row(row: list[str]) -> bool:
    return len(row) == 0 or (len(row) == 1 and row[0] == "")


def parse_delimited(text: str, delimiter: str = ",") -> list[list[str]]:
    """Split raw export text into rows of string fields.

    Quoted fields may contain the delimiter, doubled quotes and line breaks.
    Blank lines are dropped and an unterminated quote at the end of the input
    keeps whatever text it swallowed instead of failing.
    """
    rows: list[list[str]] = []
    current_row: list[str] = []
    field_chars: list[str] = []
    in_quotes = False

    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        next_char = text[index + 1] if index + 1 < length else ""

        if in_quotes:
            if char == QUOTE and next_char == QUOTE:
                field_chars.append(QUOTE)
                index += 1
            elif char == QUOTE:
                in_quotes = False
            else:
                field_chars.append(char)
        elif char == QUOTE:
            in_quotes = True
        elif char == delimiter:
            current_row.append("".join(field_chars))
            field_chars = []
        elif char == "\n" or (char == "\r" and next_char == "\n"):
            current_row.append("".join(field_chars))
            if not _is_blank_row(current_row):
                rows.append(current_row)
            current_row = []
            field_chars = []
            if char == "\r":
                index += 1
        elif char != "\r":
            field_chars.append(char)

        index += 1

    if field_chars or current_row:
        current_row.append("".join(field_chars))
        if not _is_blank_row(current_row):
            rows.append(current_row)

    if in_quotes:
        logger.debug("Unterminated quoted field at end of input; kept as literal text.")

    logger.debug("Parsed %d delimited row(s).", len(rows))
    return rows
