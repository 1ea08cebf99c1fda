"""Environment configuration and directory management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from google import genai
from google.genai import types

from .logger import LOGGER


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not already exist."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_path(env_key: str, default: Path) -> Path:
    """Resolve a path from environment variables or revert to a default."""
    value = os.getenv(env_key)
    return ensure_directory(Path(value).expanduser().resolve()) if value else ensure_directory(default.resolve())


def load_api_key() -> str:
    """Retrieve the Gemini API key or raise a helpful error."""
    key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
    if not key:
        raise RuntimeError("GOOGLE_API_KEY environment variable is required.")
    return key


def _split_models(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class PathConfig:
    base_dir: Path
    data_dir: Path
    db_path: Path


@dataclass(frozen=True)
class ModelConfig:
    """Model identifiers and per-call limits for the generative backend."""

    question_model: str
    text_model: str
    fallback_models: Tuple[str, ...]
    timeout_ms: int
    retry_delay: float

    def chain_for(self, model: str) -> List[str]:
        """The requested model first, then every fallback not already tried."""
        return [model] + [m for m in self.fallback_models if m != model]


def build_paths(base_dir: Optional[Path] = None) -> PathConfig:
    """Produce all filesystem paths used by the application."""
    base = base_dir or Path(__file__).resolve().parent.parent
    data_dir = resolve_path("ELICIT_DATA_DIR", base / "data")
    return PathConfig(
        base_dir=base,
        data_dir=data_dir,
        db_path=data_dir / "elicit.db",
    )


def build_model_config() -> ModelConfig:
    """Read model identifiers and timeouts from the environment."""
    return ModelConfig(
        question_model=os.getenv("ELICIT_QUESTION_MODEL", "gemini-2.0-flash"),
        text_model=os.getenv("ELICIT_TEXT_MODEL", "gemini-2.5-flash"),
        fallback_models=_split_models(os.getenv("ELICIT_FALLBACK_MODELS", "gemini-2.5-flash,gemini-2.0-flash")),
        timeout_ms=int(os.getenv("ELICIT_LLM_TIMEOUT_MS", "30000")),
        retry_delay=float(os.getenv("ELICIT_RETRY_DELAY", "0.5")),
    )


class AppConfig:
    """Singleton-like accessor around shared configuration."""

    _instance: Optional["AppConfig"] = None

    def __init__(self) -> None:
        self.paths = build_paths()
        self.models = build_model_config()
        self._client: Optional[genai.Client] = None
        LOGGER.debug("Configuration initialised with data directory %s", self.paths.data_dir)
        LOGGER.info(
            "Models: questions=%s text=%s fallbacks=%s timeout=%dms",
            self.models.question_model,
            self.models.text_model,
            ",".join(self.models.fallback_models) or "-",
            self.models.timeout_ms,
        )

    @property
    def client(self) -> genai.Client:
        """Gemini client, created on first use so the store works without a key."""
        if self._client is None:
            self._client = genai.Client(
                api_key=load_api_key(),
                http_options=types.HttpOptions(timeout=self.models.timeout_ms),
            )
        return self._client

    @classmethod
    def get(cls) -> "AppConfig":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next ``get`` re-reads the environment."""
        cls._instance = None


__all__ = [
    "AppConfig",
    "ModelConfig",
    "PathConfig",
    "build_model_config",
    "build_paths",
    "load_api_key",
]
