"""Data models shared across biometric gate modules."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field, field_validator


def b64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64_decode(data: str) -> bytes:
    return base64.b64decode(data.encode("ascii"), validate=True)


class FeatureState(str, Enum):
    UNCONFIGURED = "unconfigured"
    ENABLED = "enabled"
    DISABLED = "disabled"


class DomainStateStatus(str, Enum):
    UNCHANGED = "unchanged"
    ACCEPTED = "accepted"


class FeatureFlagsModel(BaseModel):
    """Persisted mapping of feature name to "requires biometric auth"."""

    features: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("features")
    @classmethod
    def reject_empty_names(cls, value: Dict[str, bool]) -> Dict[str, bool]:
        if any(not name for name in value):
            raise ValueError("feature names cannot be empty")
        return value

    def encode(self) -> bytes:
        return json.dumps(self.features, sort_keys=True).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes | None) -> "FeatureFlagsModel":
        if not data:
            return cls()
        return cls.model_validate({"features": json.loads(data.decode("utf-8"))})


@dataclass(frozen=True)
class FeatureFlag:
    feature: str
    enabled: bool

    @property
    def state(self) -> FeatureState:
        return FeatureState.ENABLED if self.enabled else FeatureState.DISABLED
