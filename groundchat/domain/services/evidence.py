# groundchat/domain/services/evidence.py
# Pure domain service: maps loosely-typed search rows onto EvidenceRecord.
from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from groundchat.domain.models import EvidenceRecord

# Candidate keys, highest priority first. The first non-empty value wins.
TEXT_FIELDS: tuple[str, ...] = ("content", "text", "chunk", "body", "page_text", "document")
SOURCE_FIELDS: tuple[str, ...] = ("source", "url", "source_url", "page_url", "doc_url", "path")
SCORE_FIELDS: tuple[str, ...] = ("similarity", "score")


def first_present(row: Mapping[str, Any], fields: Sequence[str]) -> str:
    """Return the first candidate field that is non-empty once stringified and trimmed."""
    for name in fields:
        value = row.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _score(row: Mapping[str, Any]) -> float:
    for name in SCORE_FIELDS:
        value = row.get(name)
        if value is None:
            continue
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0.0
        return score if math.isfinite(score) else 0.0
    return 0.0


def normalize_row(row: Mapping[str, Any]) -> EvidenceRecord:
    return EvidenceRecord(
        text=first_present(row, TEXT_FIELDS),
        source=first_present(row, SOURCE_FIELDS),
        relevance=_score(row),
    )


def normalize_rows(rows: Iterable[Mapping[str, Any] | None]) -> list[EvidenceRecord]:
    """
    Normalize rows in backend order and drop records without text.

    Records with an empty source are kept (unattributed evidence).
    Non-mapping rows carry no usable fields and are skipped.
    """
    records: list[EvidenceRecord] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        record = normalize_row(row)
        if record.text:
            records.append(record)
    return records
