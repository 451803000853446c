"""Feature gating on top of the platform biometric service."""

from __future__ import annotations

import json
import logging
import secrets
import sys
from typing import Dict, Optional

from .config import GateSettings
from .domain_state import DomainStateTracker
from .errors import AuthenticationNotAvailable, DomainStateChanged, VerifierError
from .feature_flags import FeatureFlagStore
from .models import FeatureState
from .storage import PersistentKeyValueStore, build_store
from .verifier import BiometricVerifier, StaticVerifier, TouchIDVerifier

LOGGER = logging.getLogger(__name__)

STAGE_LABELS = {
    "available": "Availability",
    "enable": "Enable",
    "disable": "Disable",
    "request": "Request",
}
EVENT_LABELS = {
    ("available", "domain_state.changed"): "Biometric enrollment changed",
    ("available", "unavailable"): "Biometric authentication unavailable",
    ("enable", "success"): "Feature gated",
    ("disable", "not_gated"): "Feature was not gated",
    ("disable", "denied"): "Challenge denied, feature stays gated",
    ("disable", "success"): "Feature ungated",
    ("request", "not_gated"): "Feature not gated, access granted",
    ("request", "granted"): "Challenge passed",
    ("request", "denied"): "Challenge denied",
    ("challenge", "error"): "Challenge failed",
}


def _truncate(value: str, limit: int = 64) -> str:
    if len(value) <= limit:
        return value
    half = limit // 2
    return f"{value[:half]}…{value[-half:]}"


def _build_payload(req: str, **fields: object) -> dict[str, object]:
    payload: dict[str, object] = {"request_id": req}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, str):
            payload[key] = _truncate(value)
        else:
            payload[key] = value
    return payload


def _log(stage: str, event: str, req: str, level: int = logging.INFO, **fields: object) -> None:
    stage_label = STAGE_LABELS.get(stage, stage.title())
    event_label = EVENT_LABELS.get((stage, event), event)
    payload = json.dumps(_build_payload(req, **fields), indent=2, sort_keys=True)
    message = f"[BiometricGate: {stage_label}]: {event_label}\n{payload}"
    LOGGER.log(level, message)


def default_verifier(settings: GateSettings) -> BiometricVerifier:
    if sys.platform == "darwin":
        return TouchIDVerifier(timeout=settings.verifier_timeout)
    return StaticVerifier(available=False)


class BiometricGate:
    """Per-feature biometric authentication toggles.

    Every operation first asks the platform whether biometric authentication
    can be evaluated and whether enrollment changed. A gated feature on a
    device that lost biometric capability therefore reports "unavailable"
    rather than falling back to ungated access.
    """

    def __init__(
        self,
        settings: Optional[GateSettings] = None,
        store: Optional[PersistentKeyValueStore] = None,
        verifier: Optional[BiometricVerifier] = None,
    ) -> None:
        self.settings = settings or GateSettings()
        self.store = store if store is not None else build_store(self.settings)
        self.verifier = verifier if verifier is not None else default_verifier(self.settings)
        self.flags = FeatureFlagStore(self.store, self.settings.features_key)
        self.domain_state = DomainStateTracker(
            self.store, self.verifier, self.settings.domain_state_key
        )

    # ------------------------------------------------------------------
    def is_available(self, req_id: Optional[str] = None) -> bool:
        req_id = req_id or secrets.token_hex(4)
        available = self.verifier.can_authenticate()
        try:
            self.domain_state.check_and_maybe_accept(self.settings.force_fail_on_change)
        except DomainStateChanged:
            _log("available", "domain_state.changed", req_id, level=logging.WARNING)
            raise
        if not available:
            _log("available", "unavailable", req_id, level=logging.WARNING)
        return available

    def require_available(self) -> None:
        if not self.is_available():
            raise AuthenticationNotAvailable(
                "Biometric authentication is not available on this device"
            )

    def is_feature_gated(self, feature: str) -> bool:
        return self.flags.is_enabled(feature)

    def feature_state(self, feature: str) -> FeatureState:
        return self.flags.state(feature)

    def list_features(self) -> Dict[str, FeatureState]:
        return {
            name: FeatureState.ENABLED if enabled else FeatureState.DISABLED
            for name, enabled in sorted(self.flags.all_flags().items())
        }

    # ------------------------------------------------------------------
    def enable(self, feature: str) -> bool:
        req_id = secrets.token_hex(4)
        if not self.is_available(req_id):
            return False
        self.flags.set_enabled(feature, True)
        _log("enable", "success", req_id, feature=feature)
        return True

    def disable(self, feature: str, reason: Optional[str] = None) -> bool:
        req_id = secrets.token_hex(4)
        if not self.is_available(req_id):
            return False
        if not self.is_feature_gated(feature):
            _log("disable", "not_gated", req_id, feature=feature)
            return True
        if not self._evaluate(reason, req_id, feature):
            _log("disable", "denied", req_id, level=logging.WARNING, feature=feature)
            return False
        self.flags.set_enabled(feature, False)
        _log("disable", "success", req_id, feature=feature)
        return True

    def request_authentication(self, feature: str, reason: Optional[str] = None) -> bool:
        req_id = secrets.token_hex(4)
        if not self.is_available(req_id):
            return False
        if not self.is_feature_gated(feature):
            _log("request", "not_gated", req_id, feature=feature)
            return True
        granted = self._evaluate(reason, req_id, feature)
        _log(
            "request",
            "granted" if granted else "denied",
            req_id,
            level=logging.INFO if granted else logging.WARNING,
            feature=feature,
        )
        return granted

    # Helpers -----------------------------------------------------------
    def _evaluate(self, reason: Optional[str], req_id: str, feature: str) -> bool:
        try:
            return bool(self.verifier.evaluate(reason or self.settings.default_reason))
        except VerifierError as exc:
            _log("challenge", "error", req_id, level=logging.ERROR, feature=feature, error=str(exc))
            raise
