from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from biometric_gate.domain_state import DomainStateTracker
from biometric_gate.errors import DomainStateChanged
from biometric_gate.models import DomainStateStatus
from biometric_gate.storage import MemoryValueStore
from biometric_gate.verifier import StaticVerifier


@pytest.fixture
def tracker():
    verifier = StaticVerifier(fingerprint=b"fp-1")
    return DomainStateTracker(MemoryValueStore(), verifier, key="domain")


def test_first_observation_is_accepted(tracker):
    assert tracker.check_and_maybe_accept(True) is DomainStateStatus.ACCEPTED
    assert tracker.stored_fingerprint() == b"fp-1"


def test_same_fingerprint_is_unchanged(tracker):
    tracker.check_and_maybe_accept(True)
    assert tracker.check_and_maybe_accept(True) is DomainStateStatus.UNCHANGED


def test_change_in_strict_mode_fails_then_rebaselines(tracker):
    tracker.check_and_maybe_accept(True)
    tracker.verifier.fingerprint = b"fp-2"

    with pytest.raises(DomainStateChanged):
        tracker.check_and_maybe_accept(True)
    assert tracker.stored_fingerprint() is None

    assert tracker.check_and_maybe_accept(True) is DomainStateStatus.ACCEPTED
    assert tracker.stored_fingerprint() == b"fp-2"


def test_change_in_lenient_mode_is_accepted(tracker):
    tracker.check_and_maybe_accept(False)
    tracker.verifier.fingerprint = b"fp-2"

    assert tracker.check_and_maybe_accept(False) is DomainStateStatus.ACCEPTED
    assert tracker.stored_fingerprint() is None


def test_missing_current_fingerprint_keeps_baseline(tracker):
    tracker.check_and_maybe_accept(True)
    tracker.verifier.fingerprint = None

    assert tracker.check_and_maybe_accept(True) is DomainStateStatus.UNCHANGED
    assert tracker.stored_fingerprint() == b"fp-1"


def test_reset_forgets_baseline(tracker):
    tracker.check_and_maybe_accept(True)
    tracker.reset()
    tracker.verifier.fingerprint = b"fp-3"
    assert tracker.check_and_maybe_accept(True) is DomainStateStatus.ACCEPTED


class RecordingStore(MemoryValueStore):
    def __init__(self) -> None:
        super().__init__()
        self.calls = []

    def set(self, key, value):
        self.calls.append(("set", key))
        super().set(key, value)

    def update(self, key, transform):
        self.calls.append(("update", key))
        return super().update(key, transform)


def test_baseline_is_compared_and_written_atomically():
    store = RecordingStore()
    tracker = DomainStateTracker(store, StaticVerifier(fingerprint=b"fp-1"), key="domain")

    tracker.check_and_maybe_accept(True)
    tracker.verifier.fingerprint = b"fp-2"
    with pytest.raises(DomainStateChanged):
        tracker.check_and_maybe_accept(True)

    assert store.calls == [("update", "domain"), ("update", "domain")]


def test_concurrent_first_checks_accept_exactly_once():
    tracker = DomainStateTracker(
        MemoryValueStore(), StaticVerifier(fingerprint=b"fp-1"), key="domain"
    )
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: tracker.check_and_maybe_accept(True), range(32)))

    assert results.count(DomainStateStatus.ACCEPTED) == 1
    assert results.count(DomainStateStatus.UNCHANGED) == 31
    assert tracker.stored_fingerprint() == b"fp-1"
