"""Per-feature biometric authentication gating."""

from .async_gate import AsyncBiometricGate
from .config import GateSettings
from .domain_state import DomainStateTracker
from .errors import (
    AuthenticationNotAvailable,
    BiometricAuthError,
    DomainStateChanged,
    StorageError,
    VerifierError,
)
from .feature_flags import FeatureFlagStore
from .gate import BiometricGate
from .models import DomainStateStatus, FeatureState
from .storage import JsonFileValueStore, KeyringValueStore, MemoryValueStore
from .verifier import ConsoleVerifier, StaticVerifier, TouchIDVerifier

__all__ = [
    "AsyncBiometricGate",
    "BiometricGate",
    "GateSettings",
    "DomainStateTracker",
    "FeatureFlagStore",
    "FeatureState",
    "DomainStateStatus",
    "KeyringValueStore",
    "JsonFileValueStore",
    "MemoryValueStore",
    "TouchIDVerifier",
    "StaticVerifier",
    "ConsoleVerifier",
    "BiometricAuthError",
    "DomainStateChanged",
    "AuthenticationNotAvailable",
    "VerifierError",
    "StorageError",
]
