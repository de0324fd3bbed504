import importlib
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

import torch
from dotenv import load_dotenv

load_dotenv()

MODEL_ID = "unitary/toxic-bert"
THRESHOLD = 0.8  # minimum confidence for a "Toxic" verdict
MAX_LENGTH = 512
PROVIDER_FACTORY = "toxicity_checker.bert_provider:ToxicBertProvider"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    model_id: str = MODEL_ID
    threshold: float = THRESHOLD
    labels: Optional[Tuple[str, ...]] = None
    device: str = "cpu"
    max_length: int = MAX_LENGTH
    log_level: str = "INFO"
    provider_factory: str = PROVIDER_FACTORY

    def __post_init__(self):
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.max_length <= 0:
            raise ValueError(f"max_length must be positive, got {self.max_length}")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {self.log_level!r}")
        if ":" not in self.provider_factory:
            raise ValueError(
                f"provider_factory must look like 'package.module:callable', got {self.provider_factory!r}"
            )


def default_device() -> str:
    return "cuda" if torch.cuda.is_available() else "cpu"


def _parse_labels(raw: Optional[str]) -> Optional[Tuple[str, ...]]:
    if not raw:
        return None
    labels = tuple(part.strip() for part in raw.split(",") if part.strip())
    return labels or None


def _parse_float(name: str, raw: Optional[str], default: float) -> float:
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _parse_int(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def load_settings(environ=None) -> Settings:
    """Build Settings from environment variables (and a .env file, if present).

    Args:
        environ (Mapping, optional): source of variables. Defaults to os.environ.

    Returns:
        Settings: validated settings
    """
    env = os.environ if environ is None else environ
    return Settings(
        model_id=env.get("TOXICITY_MODEL") or MODEL_ID,
        threshold=_parse_float("TOXICITY_THRESHOLD", env.get("TOXICITY_THRESHOLD"), THRESHOLD),
        labels=_parse_labels(env.get("TOXICITY_LABELS")),
        device=env.get("TOXICITY_DEVICE") or default_device(),
        max_length=_parse_int("TOXICITY_MAX_LENGTH", env.get("TOXICITY_MAX_LENGTH"), MAX_LENGTH),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        provider_factory=env.get("TOXICITY_PROVIDER") or PROVIDER_FACTORY,
    )


def resolve_factory(path: str):
    """Import the callable named by a ``package.module:callable`` path.

    It is called as ``factory(model_id, device=..., labels=..., max_length=...)``
    and must return a model provider.
    """
    module_name, _, attr = path.partition(":")
    return getattr(importlib.import_module(module_name), attr)


def provider_factory(settings: Settings):
    return resolve_factory(settings.provider_factory)


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
