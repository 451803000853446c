"""Feature name to "requires biometric auth" flag storage."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from pydantic import ValidationError

from .errors import StorageError
from .models import FeatureFlag, FeatureFlagsModel, FeatureState
from .storage import PersistentKeyValueStore

LOGGER = logging.getLogger(__name__)


class FeatureFlagStore:
    def __init__(self, store: PersistentKeyValueStore, key: str = "BiometricAuthFeatures"):
        self.store = store
        self.key = key

    def _load(self, raw: Optional[bytes]) -> FeatureFlagsModel:
        try:
            return FeatureFlagsModel.decode(raw)
        except (ValueError, ValidationError) as exc:
            raise StorageError(f"Feature flags under {self.key} are unreadable") from exc

    def is_enabled(self, feature: str) -> bool:
        return self._load(self.store.get(self.key)).features.get(feature, False)

    def state(self, feature: str) -> FeatureState:
        flags = self._load(self.store.get(self.key)).features
        if feature not in flags:
            return FeatureState.UNCONFIGURED
        return FeatureFlag(feature, flags[feature]).state

    def set_enabled(self, feature: str, enabled: bool) -> None:
        if not feature:
            raise ValueError("feature name cannot be empty")

        def upsert(raw: Optional[bytes]) -> bytes:
            model = self._load(raw)
            model.features[feature] = enabled
            return model.encode()

        self.store.update(self.key, upsert)
        LOGGER.debug("Feature %r flag set to %s", feature, enabled)

    def all_flags(self) -> Dict[str, bool]:
        return dict(self._load(self.store.get(self.key)).features)
