from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from babel.core import Locale, UnknownLocaleError

from brew_calc import DEFAULT_BOTTLE_OZ, clamp_bottle_size, whole_cartons

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    default_cartons: int = 1
    default_bottle_oz: float = DEFAULT_BOTTLE_OZ
    locale: str = "en_US"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Read overrides from BREW_* / LOG_LEVEL environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            default_cartons=whole_cartons(_env_number(env, "BREW_DEFAULT_CARTONS", 1)),
            default_bottle_oz=clamp_bottle_size(_env_number(env, "BREW_BOTTLE_OZ", DEFAULT_BOTTLE_OZ)),
            locale=_env_locale(env, "BREW_LOCALE", "en_US"),
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
        )


def _env_number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number), using %s", name, raw, default)
        return default


def _env_locale(env: Mapping[str, str], name: str, default: str) -> str:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        Locale.parse(raw)
    except (UnknownLocaleError, ValueError):
        logger.warning("Ignoring %s=%r (unknown locale), using %s", name, raw, default)
        return default
    return raw
