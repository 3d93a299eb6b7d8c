"""
Decoding of fetched diary rows into typed values.

Malformed entries are recovered as absent values and reported back as
EntryError records so the caller can surface them (import feedback, UI).
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from yatra.errors import ParseError
from yatra.models import DiaryRow, YatraPractice
from yatra.values import Value, value_from_json

logger = logging.getLogger(__name__)


EntryKey = Tuple[str, date, str]  # (participant_id, cob_date, practice_id)


@dataclass(frozen=True)
class EntryError:
    participant_id: str
    cob_date: date
    practice_id: str
    message: str

    def to_dict(self) -> dict:
        return {
            "participant_id": self.participant_id,
            "cob_date": self.cob_date.isoformat(),
            "practice_id": self.practice_id,
            "message": self.message,
        }


@dataclass(frozen=True)
class DecodedEntries:
    values: Dict[EntryKey, Value]
    errors: List[EntryError]
    names: Dict[str, str]  # participant_id -> participant_name

    def get(self, participant_id: str, day: date, practice_id: str) -> Optional[Value]:
        return self.values.get((participant_id, day, practice_id))


def decode_entries(
    rows: Iterable[DiaryRow],
    practices: Iterable[YatraPractice],
) -> DecodedEntries:
    """
    Decode raw row values against their practices' declared data types.

    Rows for unknown practices are ignored. A value whose tag does not match
    the practice's data type is treated as a parse error.
    """
    types = {p.id: p.data_type for p in practices}
    values: Dict[EntryKey, Value] = {}
    errors: List[EntryError] = []
    names: Dict[str, str] = {}

    for row in rows:
        names.setdefault(row.participant_id, row.participant_name)

        data_type = types.get(row.practice_id)
        if data_type is None:
            logger.debug("Ignoring entry for unknown practice %s", row.practice_id)
            continue

        try:
            value = value_from_json(row.value)
            if value is not None and value.data_type is not data_type:
                raise ParseError(
                    f"{value.data_type.value} value for a {data_type.value} practice"
                )
        except ParseError as e:
            logger.warning(
                "Treating entry as absent: participant=%s day=%s practice=%s: %s",
                row.participant_id, row.cob_date, row.practice_id, e,
                extra={
                    "yatra_participant_id": row.participant_id,
                    "yatra_practice_id": row.practice_id,
                },
            )
            errors.append(EntryError(row.participant_id, row.cob_date, row.practice_id, str(e)))
            continue

        if value is None:
            continue

        key = (row.participant_id, row.cob_date, row.practice_id)
        if key in values:
            logger.debug("Duplicate entry for %s, keeping the last one", key)
        values[key] = value

    return DecodedEntries(values=values, errors=errors, names=names)
