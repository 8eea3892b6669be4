from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from typescore.core.errors import InvalidStateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptScore:
    """Score of a single finished typing attempt."""

    wpm: int
    accuracy: float
    word_count: int
    correct_chars: int
    typed_chars: int
    elapsed_minutes: float


class TrackerState(Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"


def count_words(typed: str) -> int:
    """Number of whitespace-delimited tokens in *typed*."""
    return len(typed.split())


def count_correct_chars(typed: str, passage: str) -> int:
    """Positions where *typed* matches *passage* character for character.

    Characters typed past the end of the passage never match, and passage
    characters not yet typed are not counted.
    """
    return sum(1 for a, b in zip(typed, passage) if a == b)


def compute_accuracy(correct_chars: int, typed_chars: int) -> float:
    accuracy = 100.0 * correct_chars / max(1, typed_chars)
    return min(100.0, max(0.0, accuracy))


def compute_wpm(word_count: int, elapsed_minutes: float) -> int:
    """Words per minute, rounded to the nearest whole word.

    Halves round up, so 2.5 words per minute scores 3. Zero or negative
    elapsed time (and NaN) scores 0 instead of dividing.
    """
    if not elapsed_minutes > 0:
        return 0
    rate = word_count / elapsed_minutes
    if not math.isfinite(rate):
        return 0
    return math.floor(rate + 0.5)


def score_attempt(passage: str, typed: str, elapsed_seconds: float) -> AttemptScore:
    """Score *typed* against *passage* for an attempt lasting *elapsed_seconds*."""
    elapsed_minutes = elapsed_seconds / 60.0
    word_count = count_words(typed)
    correct = count_correct_chars(typed, passage)
    return AttemptScore(
        wpm=compute_wpm(word_count, elapsed_minutes),
        accuracy=compute_accuracy(correct, len(typed)),
        word_count=word_count,
        correct_chars=correct,
        typed_chars=len(typed),
        elapsed_minutes=elapsed_minutes,
    )


class TypingTracker:
    """Tracks a single typing attempt from start to finish.

    The tracker is a two-state machine::

        IDLE --start_attempt--> IN_PROGRESS --finish_attempt--> IDLE

    ``record_input`` takes the full text typed so far rather than a delta, so
    repeated or shrinking snapshots (backspacing) are handled the same way as
    ordinary typing.

    Speed is counted in whitespace-delimited words typed, not in 5-character
    words; accuracy is the share of typed characters matching the passage at
    the same position. WPM rounds half up to a whole number.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._state = TrackerState.IDLE
        self._passage = ""
        self._typed_text = ""
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def passage(self) -> str:
        return self._passage

    @property
    def typed_text(self) -> str:
        return self._typed_text

    @property
    def start_time(self) -> Optional[float]:
        """Clock reading when the current (or last) attempt started."""
        return self._start_time

    @property
    def end_time(self) -> Optional[float]:
        """Clock reading when the last attempt finished, None while in progress."""
        return self._end_time

    def start_attempt(self, passage: str) -> None:
        """Begin a new attempt, discarding any unfinished one."""
        if self._state is TrackerState.IN_PROGRESS:
            logger.debug("Discarding unfinished attempt")
        self._passage = passage
        self._typed_text = ""
        self._start_time = self._clock()
        self._end_time = None
        self._state = TrackerState.IN_PROGRESS

    def record_input(self, current_typed_text: str) -> None:
        """Replace the typed text with the latest snapshot."""
        if self._state is not TrackerState.IN_PROGRESS:
            raise InvalidStateError("record_input called with no attempt in progress")
        self._typed_text = current_typed_text

    def finish_attempt(self) -> AttemptScore:
        """Stop the clock and score the attempt."""
        if self._state is not TrackerState.IN_PROGRESS:
            raise InvalidStateError("finish_attempt called with no attempt in progress")
        self._end_time = self._clock()
        self._state = TrackerState.IDLE
        score = score_attempt(
            self._passage,
            self._typed_text,
            self._end_time - self._start_time,
        )
        logger.debug(
            "Attempt finished: %d wpm, %.1f%% accuracy over %.3f min",
            score.wpm,
            score.accuracy,
            score.elapsed_minutes,
        )
        return score
