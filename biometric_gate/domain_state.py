"""Tracks the enrolled-biometrics fingerprint between checks.

Platforms expose an opaque token (``evaluatedPolicyDomainState`` on macOS)
that changes whenever a fingerprint or face is added or removed. A change can
mean someone else enrolled on the device, so the tracker lets the caller
decide whether to fail hard or silently re-baseline.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import DomainStateChanged
from .models import DomainStateStatus
from .storage import PersistentKeyValueStore
from .verifier import BiometricVerifier

LOGGER = logging.getLogger(__name__)


class DomainStateTracker:
    def __init__(
        self,
        store: PersistentKeyValueStore,
        verifier: BiometricVerifier,
        key: str = "BiometricAuthOldDomainStateDefaultsKey",
    ) -> None:
        self.store = store
        self.verifier = verifier
        self.key = key

    def current_fingerprint(self) -> Optional[bytes]:
        return self.verifier.current_enrollment_fingerprint()

    def stored_fingerprint(self) -> Optional[bytes]:
        return self.store.get(self.key)

    def check_and_maybe_accept(self, force_fail_on_change: bool) -> DomainStateStatus:
        current = self.current_fingerprint()
        outcome = {"status": DomainStateStatus.UNCHANGED, "changed": False}

        def compare(previous: Optional[bytes]) -> Optional[bytes]:
            if previous is None:
                outcome["status"] = DomainStateStatus.ACCEPTED
                return current
            # Without a current reading there is nothing to compare against.
            if current is None or current == previous:
                return previous
            outcome["changed"] = True
            return None

        self.store.update(self.key, compare)
        if not outcome["changed"]:
            return outcome["status"]

        if force_fail_on_change:
            LOGGER.warning("Biometric enrollment changed; baseline cleared")
            raise DomainStateChanged()
        LOGGER.info("Biometric enrollment changed; accepting new state")
        return DomainStateStatus.ACCEPTED

    def reset(self) -> None:
        self.store.set(self.key, None)
