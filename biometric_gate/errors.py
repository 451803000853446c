"""Errors raised by the biometric gate."""

from __future__ import annotations


class BiometricAuthError(RuntimeError):
    pass


class DomainStateChanged(BiometricAuthError):
    """Biometric enrollment changed since the last accepted fingerprint."""

    def __init__(self, message: str = "Biometric enrollment changed since last check") -> None:
        super().__init__(message)


class AuthenticationNotAvailable(BiometricAuthError):
    pass


class VerifierError(BiometricAuthError):
    """A platform-reported evaluation failure (cancel, lockout, timeout...)."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class StorageError(BiometricAuthError):
    pass
