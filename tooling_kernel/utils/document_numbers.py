"""
Human-readable document numbers: ``{PREFIX}-{YYYY}-{NNN}``.

Sequences restart every calendar year.  The next number is one past the
highest well-formed number already issued for the same prefix and year;
malformed numbers are ignored, so an unreadable history starts again at 1.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum

from tooling_kernel.logging_config import get_logger

logger = get_logger("utils.document_numbers")

DEFAULT_WIDTH = 3


class DocumentPrefix(Enum):
    PROJECT = "PROJ"
    PURCHASE_REQUISITION = "PR"
    QUOTATION = "QUOT"
    HANDOVER = "HAND"
    SPARES_REQUEST = "REQ"


def format_document_number(
    prefix: DocumentPrefix | str,
    year: int,
    sequence: int,
    width: int = DEFAULT_WIDTH,
) -> str:
    if sequence < 1:
        raise ValueError(f"sequence must be >= 1, got {sequence}")
    code = prefix.value if isinstance(prefix, DocumentPrefix) else prefix
    return f"{code}-{year}-{sequence:0{width}d}"


def parse_document_number(
    number: str, prefix: DocumentPrefix | str,
) -> tuple[int, int] | None:
    """Return ``(year, sequence)`` or None when ``number`` is not well-formed."""
    code = prefix.value if isinstance(prefix, DocumentPrefix) else prefix
    match = re.fullmatch(rf"{re.escape(code)}-(\d{{4}})-(\d+)", number or "")
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def next_document_number(
    prefix: DocumentPrefix | str,
    existing: Iterable[str],
    year: int,
    width: int = DEFAULT_WIDTH,
) -> str:
    """Next number for ``prefix`` in ``year`` given the numbers already issued."""
    highest = 0
    skipped = 0
    for number in existing:
        parsed = parse_document_number(number, prefix)
        if parsed is None:
            skipped += 1
            continue
        issued_year, sequence = parsed
        if issued_year == year and sequence > highest:
            highest = sequence

    if skipped:
        logger.debug(
            "document_numbers_skipped_malformed",
            extra={"prefix": prefix, "skipped": skipped},
        )
    return format_document_number(prefix, year, highest + 1, width)
