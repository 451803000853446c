from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from biometric_gate import BiometricGate, MemoryValueStore, StaticVerifier
from biometric_gate.config import GateSettings


@pytest.fixture(autouse=True)
def fake_keyring(monkeypatch):
    storage: Dict[Tuple[str, str], str] = {}

    def set_password(service: str, username: str, password: str) -> None:
        storage[(service, username)] = password

    def get_password(service: str, username: str) -> str | None:
        return storage.get((service, username))

    def delete_password(service: str, username: str) -> None:
        storage.pop((service, username), None)

    monkeypatch.setattr("biometric_gate.storage.keyring.set_password", set_password)
    monkeypatch.setattr("biometric_gate.storage.keyring.get_password", get_password)
    monkeypatch.setattr("biometric_gate.storage.keyring.delete_password", delete_password)
    yield storage


@pytest.fixture
def temp_settings(tmp_path: Path) -> GateSettings:
    return GateSettings(
        store_backend="file",
        keyring_service="test-service",
        store_path=str(tmp_path / "store.json"),
    )


@pytest.fixture
def verifier() -> StaticVerifier:
    return StaticVerifier(available=True, fingerprint=b"fp-1", result=True)


@pytest.fixture
def gate(verifier) -> BiometricGate:
    settings = GateSettings(store_backend="memory", force_fail_on_change=True)
    return BiometricGate(settings, store=MemoryValueStore(), verifier=verifier)
