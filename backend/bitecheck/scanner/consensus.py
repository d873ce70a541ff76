"""
Barcode consensus: turn a noisy stream of camera reads into one confirmed barcode.

ConsensusScanner is a plain state machine; time is passed in, nothing is scheduled.
- Reads in the first settle interval are ignored while the camera is positioned.
- Valid reads are collected for one voting window (a round).
- A round has a winner when its most frequent code has at least min_votes and >50% of the reads.
- The same winner in rounds_needed consecutive rounds moves to AWAITING_CONFIRMATION.
- The user then confirms (CONFIRMED, scanning suspended) or rejects (back to SCANNING).

ScanSession wraps it for real time: a lock around every event and a threading.Timer for rounds.
"""
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Dict, List, Optional

from bitecheck.config import (
    get_scan_min_votes,
    get_scan_rounds_needed,
    get_scan_settle_seconds,
    get_scan_vote_window_seconds,
)
from bitecheck.scanner.barcode import is_valid_barcode

logger = logging.getLogger(__name__)

MAJORITY_SHARE = 0.5


class ScanState(str, Enum):
    SCANNING = "scanning"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class ScanVote:
    code: str
    at: float


def round_winner(votes: List[ScanVote], min_votes: int) -> Optional[str]:
    """Most frequent code (first seen wins a tie) if it has min_votes and a strict majority."""
    if len(votes) < min_votes:
        return None
    counts: Dict[str, int] = {}
    for v in votes:
        counts[v.code] = counts.get(v.code, 0) + 1
    best, best_count = None, 0
    for code, count in counts.items():
        if count > best_count:
            best, best_count = code, count
    if best_count >= min_votes and best_count / len(votes) > MAJORITY_SHARE:
        return best
    return None


class ConsensusScanner:
    def __init__(
        self,
        now: float = 0.0,
        settle_seconds: Optional[float] = None,
        window_seconds: Optional[float] = None,
        min_votes: Optional[int] = None,
        rounds_needed: Optional[int] = None,
    ):
        self.settle_seconds = settle_seconds if settle_seconds is not None else get_scan_settle_seconds()
        self.window_seconds = window_seconds if window_seconds is not None else get_scan_vote_window_seconds()
        self.min_votes = min_votes if min_votes is not None else get_scan_min_votes()
        self.rounds_needed = rounds_needed if rounds_needed is not None else get_scan_rounds_needed()
        self.start(now)

    def start(self, now: float) -> None:
        self.state = ScanState.SCANNING
        self.votes: List[ScanVote] = []
        self.streak = 0
        self.last_winner: Optional[str] = None
        self.detected: Optional[str] = None
        self.round_deadline: Optional[float] = None
        self.settle_start = now

    def on_read(self, code: str, now: float) -> bool:
        """Record one raw read. True when this read opened a round and a timer must be scheduled."""
        if self.state is not ScanState.SCANNING:
            return False
        if not is_valid_barcode(code):
            logger.debug("SCANNER discard invalid code=%s", code)
            return False
        if now - self.settle_start < self.settle_seconds:
            return False
        self.votes.append(ScanVote(code, now))
        self.votes = [v for v in self.votes if now - v.at < self.window_seconds]
        if self.round_deadline is None:
            self.round_deadline = now + self.window_seconds
            return True
        return False

    def on_round_timer(self, now: float) -> Optional[str]:
        """Resolve the current round. Returns the code when it just became awaiting confirmation."""
        votes = self.votes
        self.votes = []
        self.round_deadline = None
        if self.state is not ScanState.SCANNING:
            return None

        winner = round_winner(votes, self.min_votes)
        if winner is None:
            self.last_winner = None
            self.streak = 0
            logger.debug("SCANNER round no winner reads=%s", len(votes))
            return None
        if winner == self.last_winner:
            self.streak += 1
        else:
            self.last_winner = winner
            self.streak = 1
        logger.debug("SCANNER round winner=%s streak=%s reads=%s", winner, self.streak, len(votes))
        if self.streak >= self.rounds_needed:
            self.state = ScanState.AWAITING_CONFIRMATION
            self.detected = winner
            logger.info("SCANNER detected code=%s", winner)
            return winner
        return None

    def confirm(self) -> Optional[str]:
        if self.state is not ScanState.AWAITING_CONFIRMATION:
            return None
        self.state = ScanState.CONFIRMED
        logger.info("SCANNER confirmed code=%s", self.detected)
        return self.detected

    def reject(self, now: float) -> None:
        if self.state is ScanState.AWAITING_CONFIRMATION:
            logger.info("SCANNER rejected code=%s", self.detected)
        self.start(now)

    def restart(self, now: float) -> None:
        self.start(now)


class ScanSession:
    """
    Thread-safe driver for ConsensusScanner. feed() may be called from a camera thread;
    the round timer fires on its own thread. Callbacks run outside the lock.
    """

    def __init__(
        self,
        scanner: Optional[ConsensusScanner] = None,
        on_detected: Optional[Callable[[str], None]] = None,
        on_confirmed: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
    ):
        self._clock = clock
        self._timer_factory = timer_factory
        self.scanner = scanner if scanner is not None else ConsensusScanner(now=clock())
        self.on_detected = on_detected
        self.on_confirmed = on_confirmed
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._round = 0

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self.scanner.state

    def feed(self, code: str) -> None:
        with self._lock:
            if self.scanner.on_read(code, self._clock()):
                self._schedule()

    def _schedule(self) -> None:
        """Caller holds the lock."""
        self._round += 1
        self._timer = self._timer_factory(self.scanner.window_seconds, partial(self._fire, self._round))
        self._timer.daemon = True
        self._timer.start()

    def _cancel(self) -> None:
        """Caller holds the lock."""
        self._round += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, round_id: int) -> None:
        with self._lock:
            # a timer that lost the race with cancel() must not resolve the next round
            if round_id != self._round:
                return
            self._timer = None
            detected = self.scanner.on_round_timer(self._clock())
        if detected and self.on_detected:
            self.on_detected(detected)

    def confirm(self) -> Optional[str]:
        with self._lock:
            self._cancel()
            code = self.scanner.confirm()
        if code and self.on_confirmed:
            self.on_confirmed(code)
        return code

    def reject(self) -> None:
        with self._lock:
            self._cancel()
            self.scanner.reject(self._clock())

    def restart(self) -> None:
        with self._lock:
            self._cancel()
            self.scanner.restart(self._clock())

    def close(self) -> None:
        with self._lock:
            self._cancel()
