"""Settings loader: reads data/quiz.yaml, then applies environment overrides.

Environment variables win over the YAML file so a deployment can point the
client at another scoring service without editing files.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import BKTParameters

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "quiz.yaml"

DEFAULT_SERVICE_URL = "http://127.0.0.1:8080"
DEFAULT_TIMEOUT = 10.0
# Sessions are assumed to be ten questions long; the server never reports it.
DEFAULT_SESSION_LENGTH = 10


@dataclass(frozen=True, slots=True)
class Settings:
    service_url: str = DEFAULT_SERVICE_URL
    timeout: float = DEFAULT_TIMEOUT
    session_length: int = DEFAULT_SESSION_LENGTH
    bkt_parameters: BKTParameters | None = None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return data


def _coerce(name: str, value: Any, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for {name}: {value!r}") from exc


def _bkt_block(raw: Any) -> BKTParameters | None:
    if not raw:
        return None
    if not isinstance(raw, Mapping):
        raise ValueError("bkt must be a mapping with l0, t, s and g")
    values = {key: _coerce(f"bkt.{key}", raw[key], float) for key in ("l0", "t", "s", "g") if key in raw}
    missing = {"l0", "t", "s", "g"} - values.keys()
    if missing:
        raise ValueError(f"bkt is missing {', '.join(sorted(missing))}")
    return BKTParameters(**values)


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build Settings from the YAML file and the environment."""
    env = os.environ if environ is None else environ
    config_path = Path(env.get("ADAPTIVE_QUIZ_CONFIG", "") or (path or DEFAULT_CONFIG_PATH))
    data = _read_yaml(config_path)

    service_url = str(env.get("ADAPTIVE_QUIZ_SERVICE_URL") or data.get("service_url") or DEFAULT_SERVICE_URL)
    timeout = _coerce(
        "ADAPTIVE_QUIZ_TIMEOUT",
        env.get("ADAPTIVE_QUIZ_TIMEOUT") or data.get("timeout", DEFAULT_TIMEOUT),
        float,
    )
    session_length = _coerce(
        "ADAPTIVE_QUIZ_SESSION_LENGTH",
        env.get("ADAPTIVE_QUIZ_SESSION_LENGTH") or data.get("session_length", DEFAULT_SESSION_LENGTH),
        int,
    )
    if session_length <= 0:
        raise ValueError("session_length must be positive")

    return Settings(
        service_url=service_url.rstrip("/"),
        timeout=timeout,
        session_length=session_length,
        bkt_parameters=_bkt_block(data.get("bkt")),
    )


__all__ = [
    "DEFAULT_SESSION_LENGTH",
    "Settings",
    "load_settings",
]
