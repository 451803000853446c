"""Configuration for the biometric gate."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GateSettings(BaseSettings):
    """Runtime settings for the biometric gate."""

    model_config = SettingsConfigDict(env_prefix="BIOMETRIC_GATE_")

    store_backend: Literal["keyring", "file", "memory"] = Field(
        default="keyring",
        description="Where feature flags and the enrollment fingerprint are persisted",
    )
    keyring_service: str = Field(
        default="biometric-gate",
        description="Service name used for keychain entries",
    )
    store_path: str = Field(
        default=str((Path.home() / ".biometric_gate" / "store.json").resolve()),
        description="Path to the JSON file used by the file backend",
    )
    features_key: str = Field(
        default="BiometricAuthFeatures",
        description="Storage key holding the feature flag mapping",
    )
    domain_state_key: str = Field(
        default="BiometricAuthOldDomainStateDefaultsKey",
        description="Storage key holding the last accepted enrollment fingerprint",
    )
    force_fail_on_change: bool = Field(
        default=True,
        description="Raise DomainStateChanged when biometric enrollment changes",
    )
    verifier_timeout: int = Field(
        default=30,
        gt=0,
        description="Seconds to wait for a Touch ID reply",
    )
    default_reason: str = Field(
        default="Authenticate with Touch ID",
        description="Prompt shown when a caller gives no reason",
    )
