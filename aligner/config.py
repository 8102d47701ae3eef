from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .guard import DEFAULT_COOLDOWN_SECONDS

DEFAULT_PROPERTIES_PATH = Path.home() / ".aligner" / "aligner.json"
DEFAULT_WORK_ROOT = Path(tempfile.gettempdir()) / "aligner_jobs"
DEFAULT_THREADS = 4
DEFAULT_COMMAND_TIMEOUT_SECONDS = 24 * 60 * 60

ENV_PREFIX = "ALIGNER_"


@dataclass(frozen=True)
class PanelConfig:
    properties_path: Path = DEFAULT_PROPERTIES_PATH
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS
    threads: int = DEFAULT_THREADS
    work_root: Path = field(default=DEFAULT_WORK_ROOT)
    command_timeout_seconds: int = DEFAULT_COMMAND_TIMEOUT_SECONDS

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PanelConfig":
        def require(name: str, default: Any) -> Any:
            value = payload.get(name, default)
            return default if value in (None, "") else value

        return cls(
            properties_path=Path(require("properties_path", DEFAULT_PROPERTIES_PATH)).expanduser(),
            cooldown_seconds=_to_non_negative_float(require("cooldown_seconds", DEFAULT_COOLDOWN_SECONDS), "cooldown_seconds"),
            threads=_to_positive_int(require("threads", DEFAULT_THREADS), "threads"),
            work_root=Path(require("work_root", DEFAULT_WORK_ROOT)).expanduser(),
            command_timeout_seconds=_to_positive_int(
                require("command_timeout_seconds", DEFAULT_COMMAND_TIMEOUT_SECONDS),
                "command_timeout_seconds",
            ),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PanelConfig":
        env = os.environ if environ is None else environ
        return cls.from_payload(
            {
                "properties_path": env.get(f"{ENV_PREFIX}PROPERTIES"),
                "cooldown_seconds": env.get(f"{ENV_PREFIX}COOLDOWN_SECONDS"),
                "threads": env.get(f"{ENV_PREFIX}THREADS"),
                "work_root": env.get(f"{ENV_PREFIX}WORK_ROOT"),
                "command_timeout_seconds": env.get(f"{ENV_PREFIX}COMMAND_TIMEOUT"),
            }
        )


def _to_non_negative_float(value: Any, name: str) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number of seconds") from exc
    if parsed < 0:
        raise ValueError(f"{name} must be >= 0")
    return parsed


def _to_positive_int(value: Any, name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be > 0")
    return parsed
