from __future__ import annotations

import pytest

from biometric_gate.errors import StorageError
from biometric_gate.feature_flags import FeatureFlagStore
from biometric_gate.models import FeatureState
from biometric_gate.storage import MemoryValueStore


def test_unknown_feature_is_not_enabled():
    flags = FeatureFlagStore(MemoryValueStore())
    assert flags.is_enabled("never-configured") is False
    assert flags.state("never-configured") is FeatureState.UNCONFIGURED


def test_flags_are_independent_per_feature():
    flags = FeatureFlagStore(MemoryValueStore())
    flags.set_enabled("vault", True)
    flags.set_enabled("settings", False)

    assert flags.is_enabled("vault") is True
    assert flags.is_enabled("settings") is False
    assert flags.state("settings") is FeatureState.DISABLED
    assert flags.all_flags() == {"vault": True, "settings": False}


def test_set_enabled_is_idempotent():
    store = MemoryValueStore()
    flags = FeatureFlagStore(store, key="features")
    flags.set_enabled("vault", True)
    first = store.get("features")
    flags.set_enabled("vault", True)
    assert store.get("features") == first


def test_empty_feature_name_rejected():
    flags = FeatureFlagStore(MemoryValueStore())
    with pytest.raises(ValueError):
        flags.set_enabled("", True)


def test_corrupt_payload_raises_storage_error():
    store = MemoryValueStore()
    store.set("features", b"[1, 2, 3]")
    flags = FeatureFlagStore(store, key="features")
    with pytest.raises(StorageError):
        flags.is_enabled("vault")
