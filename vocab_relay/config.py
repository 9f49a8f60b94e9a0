from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"
ENV_PREFIX = "VOCAB_RELAY_"

DEFAULTS = {
    "llm_provider": "openai",
    "llm_model": "gpt-4o",
    "ollama_url": "http://localhost:11434",
    "host": "127.0.0.1",
    "port": 3001,
    "cors_origins": ["*"],
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    ollama_url: str = DEFAULTS["ollama_url"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULTS["cors_origins"]))

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "ollama_url": self.ollama_url,
            "host": self.host,
            "port": self.port,
            "cors_origins": self.cors_origins,
        }


def _coerce(name: str, value: str):
    default = DEFAULTS[name]
    if isinstance(default, int):
        return int(value)
    if isinstance(default, list):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


def _env_overrides() -> dict:
    """Read ``VOCAB_RELAY_<FIELD>`` variables, e.g. ``VOCAB_RELAY_PORT=8080``."""
    overrides = {}
    for name in DEFAULTS:
        raw = os.environ.get(ENV_PREFIX + name.upper())
        if raw is not None:
            try:
                overrides[name] = _coerce(name, raw)
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}{name.upper()}={raw!r}: {e}") from e
    return overrides


def load_settings() -> Settings:
    raw: dict = {}
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
    raw.update(_env_overrides())
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    filtered = {k: v for k, v in raw.items() if k in known}
    return Settings(**filtered)
