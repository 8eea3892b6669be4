from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from typescore.core.errors import ValidationError
from typescore.core.storage import Record, ResultStorage

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("wpm", "accuracy", "timestamp")


@dataclass(frozen=True)
class TestResult:
    """A stored typing result. Never mutated once written."""

    __test__ = False  # not a pytest test class

    user_id: str
    wpm: float
    accuracy: float
    timestamp: str

    def to_record(self) -> Record:
        return {"wpm": self.wpm, "accuracy": self.accuracy, "timestamp": self.timestamp}

    @classmethod
    def from_record(cls, user_id: str, record: Record) -> "TestResult":
        return cls(
            user_id=user_id,
            wpm=record["wpm"],
            accuracy=record["accuracy"],
            timestamp=str(record["timestamp"]),
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_number(field: str, value: Any) -> float:
    # bool is an int subclass but never a meaningful score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "must be a number")
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise ValidationError(field, "must be finite")
    return value


def validate_submission(user_id: Any, wpm: Any, accuracy: Any) -> None:
    """Raise ValidationError if a submission is malformed or out of range."""
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("user_id", "must be a non-empty string")
    if _validate_number("wpm", wpm) < 0:
        raise ValidationError("wpm", "must be >= 0")
    if not 0 <= _validate_number("accuracy", accuracy) <= 100:
        raise ValidationError("accuracy", "must be between 0 and 100")


class ResultStoreService:
    """Appends typing results per user and serves each user's history back.

    Timestamps are always assigned here at write time; callers cannot supply
    one. History is returned in the order it was stored.
    """

    def __init__(
        self,
        storage: ResultStorage,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._storage = storage
        self._clock = clock

    def submit_result(self, user_id: str, wpm: float, accuracy: float) -> TestResult:
        validate_submission(user_id, wpm, accuracy)
        result = TestResult(
            user_id=user_id,
            wpm=wpm,
            accuracy=accuracy,
            timestamp=self._clock().isoformat(),
        )
        self._storage.append(user_id, result.to_record())
        logger.info("Stored result for %s: %s wpm, %s%% accuracy", user_id, wpm, accuracy)
        return result

    def get_results(self, user_id: str) -> List[TestResult]:
        """All results for *user_id*, oldest first. Unknown users have none."""
        results = []
        for record in self._storage.list(user_id):
            missing = [f for f in RECORD_FIELDS if f not in record]
            if missing:
                logger.warning("Skipping stored result for %s missing %s", user_id, ", ".join(missing))
                continue
            results.append(TestResult.from_record(user_id, record))
        return results

    def submit(self, user_id: str, wpm: float, accuracy: float) -> Dict[str, bool]:
        self.submit_result(user_id, wpm, accuracy)
        return {"stored": True}

    def fetch(self, user_id: str) -> List[Record]:
        return [r.to_record() for r in self.get_results(user_id)]
