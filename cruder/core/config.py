from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = ("1", "true", "yes")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class DecoderSettings:
    """
    Env:
      CRUDER_NAME_PATH_POOL_SIZE=64        (idle name path buffers kept for reuse)
      CRUDER_DECODE_METRICS_ENABLED=true   (count decode outcomes in prometheus)
    """

    name_path_pool_size: int = 64
    decode_metrics_enabled: bool = True

    @classmethod
    def from_env(cls) -> "DecoderSettings":
        return cls(
            name_path_pool_size=max(0, _env_int("CRUDER_NAME_PATH_POOL_SIZE", 64)),
            decode_metrics_enabled=_env_bool("CRUDER_DECODE_METRICS_ENABLED", True),
        )
