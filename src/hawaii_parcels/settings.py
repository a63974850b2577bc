from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


DEFAULT_PARCELS_LAYER_URL = (
    "https://services2.arcgis.com/tuFQUQg1xd48W6M5/arcgis/rest/services/"
    "Parcels_Hawaii_Statewide/FeatureServer/0"
)

# Principal counties of the main islands.
DEFAULT_JURISDICTIONS = ("HONOLULU", "MAUI", "HAWAII", "KAUAI")

MATCH_POLICIES = ("nearest", "first")


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v or default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = float(raw.strip())
    except ValueError:
        return default
    return v if v > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw.strip())
    except ValueError:
        return default
    return v if v > 0 else default


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = tuple(p.strip().upper() for p in raw.split(",") if p.strip())
    return items or default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from HIP_* env vars."""

    parcels_layer_url: str
    timeout_s: float
    jurisdictions: Tuple[str, ...]
    match_policy: str
    max_workers: int
    user_agent: str

    @classmethod
    def from_env(cls) -> "Settings":
        from hawaii_parcels import __version__

        policy = _env_str("HIP_MATCH_POLICY", "nearest").lower()
        if policy not in MATCH_POLICIES:
            policy = "nearest"
        return cls(
            parcels_layer_url=_env_str(
                "HIP_PARCELS_LAYER_URL", DEFAULT_PARCELS_LAYER_URL
            ).rstrip("/"),
            timeout_s=_env_float("HIP_HTTP_TIMEOUT_S", 8.0),
            jurisdictions=_env_list("HIP_JURISDICTIONS", DEFAULT_JURISDICTIONS),
            match_policy=policy,
            max_workers=_env_int("HIP_MAX_WORKERS", 4),
            user_agent=_env_str("HIP_HTTP_USER_AGENT", f"hawaii-parcels/{__version__}"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def reset_settings_cache() -> None:
    """Test helper to force env re-read."""

    get_settings.cache_clear()
