"""Biometric verifiers: Touch ID through pyobjc plus simple stand-ins."""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Protocol

from .errors import VerifierError

LOGGER = logging.getLogger(__name__)


class BiometricVerifier(Protocol):
    def can_authenticate(self) -> bool:
        ...

    def current_enrollment_fingerprint(self) -> Optional[bytes]:
        ...

    def evaluate(self, reason: str) -> bool:
        ...


def _load_local_authentication():
    try:
        import LocalAuthentication
        from Foundation import NSDate, NSRunLoop
    except ImportError:  # pragma: no cover - only hit on non-macOS
        return None
    return LocalAuthentication, NSDate, NSRunLoop


class TouchIDVerifier:
    def __init__(self, timeout: int = 30) -> None:
        self.timeout = timeout

    def _new_context(self):
        frameworks = _load_local_authentication()
        if frameworks is None:
            return None, None
        local_auth = frameworks[0]
        context = local_auth.LAContext.alloc().init()
        return context, local_auth.LAPolicyDeviceOwnerAuthenticationWithBiometrics

    def can_authenticate(self) -> bool:
        context, policy = self._new_context()
        if context is None:
            return False
        success, error = context.canEvaluatePolicy_error_(policy, None)
        if not success:
            LOGGER.info("Touch ID unavailable: %s", error)
        return bool(success)

    def current_enrollment_fingerprint(self) -> Optional[bytes]:
        context, policy = self._new_context()
        if context is None:
            return None
        # evaluatedPolicyDomainState is only populated after canEvaluatePolicy.
        success, _ = context.canEvaluatePolicy_error_(policy, None)
        if not success:
            return None
        domain_state = context.evaluatedPolicyDomainState()
        if domain_state is None:
            return None
        return bytes(domain_state)

    def evaluate(self, reason: str) -> bool:
        frameworks = _load_local_authentication()
        if frameworks is None:
            raise VerifierError("Touch ID is unavailable on this platform.")
        local_auth, NSDate, NSRunLoop = frameworks
        context = local_auth.LAContext.alloc().init()

        result_holder = {"done": False, "success": False, "error": None}

        def handler(result: bool, err) -> None:
            result_holder["done"] = True
            result_holder["success"] = bool(result)
            result_holder["error"] = err

        context.evaluatePolicy_localizedReason_reply_(
            local_auth.LAPolicyDeviceOwnerAuthenticationWithBiometrics, reason, handler
        )

        run_loop = NSRunLoop.currentRunLoop()
        deadline = time.time() + self.timeout
        while not result_holder["done"] and time.time() < deadline:
            run_loop.runUntilDate_(NSDate.dateWithTimeIntervalSinceNow_(0.1))

        if not result_holder["done"]:
            raise VerifierError("Touch ID timed out. Please try again.")
        error = result_holder["error"]
        if error is not None:
            raise VerifierError(str(error.localizedDescription()))
        return result_holder["success"]


class StaticVerifier:
    """Verifier with fixed answers; used off macOS and in tests."""

    def __init__(
        self,
        available: bool = True,
        fingerprint: Optional[bytes] = None,
        result: bool = True,
        error: Optional[str] = None,
    ) -> None:
        self.available = available
        self.fingerprint = fingerprint
        self.result = result
        self.error = error
        self.reasons: List[str] = []

    def can_authenticate(self) -> bool:
        return self.available

    def current_enrollment_fingerprint(self) -> Optional[bytes]:
        return self.fingerprint if self.available else None

    def evaluate(self, reason: str) -> bool:
        self.reasons.append(reason)
        if self.error is not None:
            raise VerifierError(self.error)
        return self.result


class ConsoleVerifier:
    """Verifier that asks for confirmation on the terminal."""

    def can_authenticate(self) -> bool:
        return True

    def current_enrollment_fingerprint(self) -> Optional[bytes]:
        return None

    def evaluate(self, reason: str) -> bool:
        try:
            answer = input(f"{reason} (y/N): ")
        except EOFError as exc:
            raise VerifierError("No terminal available for confirmation") from exc
        return answer.strip().lower() == "y"
