"""
Unit tests: GS1 barcode validation, consensus voting state machine, threaded scan session.
Run from backend: python -m pytest tests/test_scanner.py -v
"""
import pytest

EAN13 = "8901063010437"
OTHER_EAN13 = "4006381333931"
UPC_A = "036000291452"
EAN8 = "96385074"


# --- barcode validation ---

@pytest.mark.parametrize("code", [EAN13, OTHER_EAN13, UPC_A, EAN8, "3017620422003"])
def test_valid_barcodes(code):
    from bitecheck.scanner import is_valid_barcode
    assert is_valid_barcode(code)


@pytest.mark.parametrize("code", [
    "8901063010438",   # wrong check digit
    "036000291453",
    "96385075",
    "12345",           # wrong length
    "89010630104370",
    "89010630104a7",   # non-digit
    "",
    "８９０１０６３０１０４３７",  # full-width digits
    None,
    8901063010437,
])
def test_invalid_barcodes(code):
    from bitecheck.scanner import is_valid_barcode
    assert not is_valid_barcode(code)


def test_check_digit_weights():
    from bitecheck.scanner import gs1_check_digit
    assert gs1_check_digit(EAN13[:-1]) == 7
    assert gs1_check_digit(UPC_A[:-1]) == 2
    assert gs1_check_digit(EAN8[:-1]) == 4


# --- ConsensusScanner ---

def _scanner(now=0.0):
    from bitecheck.scanner import ConsensusScanner
    return ConsensusScanner(now=now, settle_seconds=1.0, window_seconds=1.2, min_votes=3, rounds_needed=2)


def _round(scanner, codes, start):
    """Feed codes 0.1s apart starting at `start`, then fire the round timer at its deadline."""
    for i, code in enumerate(codes):
        scanner.on_read(code, start + i * 0.1)
    return scanner.on_round_timer(scanner.round_deadline or start + 1.2)


def test_reads_during_settle_are_ignored():
    from bitecheck.scanner import ScanState
    s = _scanner()
    assert s.on_read(EAN13, 0.5) is False
    assert s.votes == []
    assert s.round_deadline is None
    assert s.state is ScanState.SCANNING


def test_first_valid_read_opens_round():
    s = _scanner()
    assert s.on_read(EAN13, 1.0) is True
    assert s.round_deadline == pytest.approx(2.2)
    assert s.on_read(EAN13, 1.1) is False


def test_invalid_checksum_never_counted():
    s = _scanner()
    assert s.on_read("8901063010438", 1.5) is False
    assert s.votes == []
    assert s.round_deadline is None


def test_two_winning_rounds_detect_code():
    from bitecheck.scanner import ScanState
    s = _scanner()
    assert _round(s, [EAN13] * 3, 1.0) is None
    assert s.streak == 1
    assert s.votes == [] and s.round_deadline is None
    assert _round(s, [EAN13] * 3, 3.0) == EAN13
    assert s.state is ScanState.AWAITING_CONFIRMATION
    assert s.detected == EAN13


def test_too_few_votes_resets_streak():
    s = _scanner()
    _round(s, [EAN13] * 3, 1.0)
    assert s.streak == 1
    assert _round(s, [EAN13] * 2, 3.0) is None
    assert s.streak == 0
    assert s.last_winner is None
    assert _round(s, [EAN13] * 3, 5.0) is None
    assert s.streak == 1


def test_no_majority_no_winner():
    """Three of six reads is not more than half."""
    s = _scanner()
    assert _round(s, [EAN13, OTHER_EAN13] * 3, 1.0) is None
    assert s.streak == 0


def test_winner_change_restarts_streak():
    s = _scanner()
    _round(s, [EAN13] * 3, 1.0)
    _round(s, [OTHER_EAN13] * 4 + [EAN13], 3.0)
    assert s.last_winner == OTHER_EAN13
    assert s.streak == 1


def test_noise_tolerated_with_majority():
    s = _scanner()
    noisy = [EAN13, EAN13, "8901063010438", OTHER_EAN13, EAN13]
    _round(s, noisy, 1.0)
    assert s.last_winner == EAN13
    assert _round(s, noisy, 3.0) == EAN13


def test_votes_older_than_window_are_pruned():
    s = _scanner()
    s.on_read(OTHER_EAN13, 1.0)
    s.on_read(EAN13, 2.3)
    assert [v.code for v in s.votes] == [EAN13]


def test_round_winner_needs_strict_majority():
    from bitecheck.scanner import round_winner, ScanVote
    votes = [ScanVote(OTHER_EAN13, 0), ScanVote(EAN13, 0.1)] * 3
    assert round_winner(votes, 3) is None
    assert round_winner(votes + [ScanVote(EAN13, 0.7)], 3) == EAN13
    assert round_winner([ScanVote(EAN13, 0)] * 2, 3) is None


def test_reads_ignored_while_awaiting_confirmation():
    s = _scanner()
    _round(s, [EAN13] * 3, 1.0)
    _round(s, [EAN13] * 3, 3.0)
    assert s.on_read(EAN13, 5.0) is False
    assert s.votes == []


def test_confirm_and_restart():
    from bitecheck.scanner import ScanState
    s = _scanner()
    assert s.confirm() is None
    _round(s, [EAN13] * 3, 1.0)
    _round(s, [EAN13] * 3, 3.0)
    assert s.confirm() == EAN13
    assert s.state is ScanState.CONFIRMED
    assert s.confirm() is None
    s.restart(10.0)
    assert s.state is ScanState.SCANNING
    assert s.on_read(EAN13, 10.5) is False  # new settle period


def test_reject_resets_everything():
    from bitecheck.scanner import ScanState
    s = _scanner()
    _round(s, [EAN13] * 3, 1.0)
    _round(s, [EAN13] * 3, 3.0)
    s.reject(6.0)
    assert s.state is ScanState.SCANNING
    assert s.streak == 0 and s.last_winner is None and s.detected is None
    assert s.round_deadline is None
    assert s.on_read(EAN13, 6.5) is False
    assert s.on_read(EAN13, 7.0) is True


# --- ScanSession ---

class FakeTimer:
    """Stands in for threading.Timer; fired manually by the test."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.daemon = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def _session(**kw):
    from bitecheck.scanner import ScanSession
    clock = FakeClock()
    timers = []

    def factory(interval, fn):
        t = FakeTimer(interval, fn)
        timers.append(t)
        return t

    session = ScanSession(scanner=_scanner(0.0), clock=clock, timer_factory=factory, **kw)
    return session, clock, timers


def _feed_round(session, clock, timers, start):
    for i in range(3):
        clock.now = start + i * 0.1
        session.feed(EAN13)
    clock.now = start + 1.2
    timers[-1].fire()


def test_session_schedules_one_timer_per_round():
    session, clock, timers = _session()
    clock.now = 1.0
    session.feed(EAN13)
    session.feed(EAN13)
    assert len(timers) == 1
    assert timers[0].started and timers[0].daemon
    assert timers[0].interval == 1.2


def test_session_detects_then_confirms_with_callbacks():
    from bitecheck.scanner import ScanState
    detected, confirmed = [], []
    session, clock, timers = _session(on_detected=detected.append, on_confirmed=confirmed.append)
    _feed_round(session, clock, timers, 1.0)
    assert detected == []
    _feed_round(session, clock, timers, 3.0)
    assert detected == [EAN13]
    assert session.state is ScanState.AWAITING_CONFIRMATION
    assert session.confirm() == EAN13
    assert confirmed == [EAN13]
    assert session.state is ScanState.CONFIRMED


def test_session_reject_cancels_timer_and_ignores_stale_fire():
    """A timer that fires after reject() must not resolve the next round."""
    session, clock, timers = _session()
    clock.now = 1.0
    session.feed(EAN13)
    stale = timers[-1]
    session.reject()
    assert stale.cancelled
    clock.now = 2.5
    for _ in range(3):
        session.feed(EAN13)
    stale.fire()
    assert session.scanner.votes != []
    assert session.scanner.streak == 0


def test_session_restart_and_close():
    from bitecheck.scanner import ScanState
    session, clock, timers = _session()
    clock.now = 1.0
    session.feed(EAN13)
    session.close()
    assert timers[-1].cancelled
    clock.now = 5.0
    session.restart()
    assert session.state is ScanState.SCANNING
    assert session.scanner.settle_start == 5.0
