"""Header-row detection for sheets whose labels are not on the first line."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from freight_report import DEFAULT_HEADER_KEYWORDS

logger = logging.getLogger(__name__)

HEADER_SCAN_MAX_ROWS = 20


def _score_row(row: Sequence[Any], keywords: Sequence[str]) -> int:
    score = 0
    for cell in row:
        if not isinstance(cell, str):
            continue
        text = cell.lower()
        if any(keyword in text for keyword in keywords):
            score += 1
    return score


def detect_header_row(
    rows: Sequence[Sequence[Any]],
    keywords: Sequence[str] | None = None,
    max_rows_scanned: int = HEADER_SCAN_MAX_ROWS,
) -> int:
    """Return the 0-based index of the row that most looks like a header.

    Only the first *max_rows_scanned* rows are scored. A row scores one
    point per text cell containing any keyword (case-insensitive). The
    earliest row with the highest score wins; if nothing scores, row 0.
    """
    if keywords is None:
        keywords = DEFAULT_HEADER_KEYWORDS
    lowered = [k.lower() for k in keywords if k]

    best_idx = 0
    best_score = 0
    for i, row in enumerate(rows[:max_rows_scanned]):
        score = _score_row(row, lowered)
        if score > best_score:
            best_score = score
            best_idx = i
            logger.debug("Row %d: score=%d (new best)", i, score)
        else:
            logger.debug("Row %d: score=%d", i, score)

    if best_score == 0:
        logger.info("No header keywords found; using row 0 as header")
    else:
        logger.info("Selected row %d as header (score=%d)", best_idx, best_score)
    return best_idx
