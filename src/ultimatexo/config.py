"""Runtime settings read from ``ULTIMATEXO_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .game import TieRule
from .rooms import ROOM_CODE_LENGTH

ENV_PREFIX = "ULTIMATEXO_"


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: Tuple[str, ...] = ()
    room_code_length: int = ROOM_CODE_LENGTH
    tie_rule: TieRule = TieRule.WINNER_BOARD_FULL
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default)

        origins = tuple(
            origin.strip().rstrip("/")
            for origin in get("CORS_ORIGINS", "").split(",")
            if origin.strip()
        )
        return cls(
            host=get("HOST", cls.host),
            port=int(get("PORT", str(cls.port))),
            cors_origins=origins,
            room_code_length=int(get("ROOM_CODE_LENGTH", str(cls.room_code_length))),
            tie_rule=TieRule(get("TIE_RULE", cls.tie_rule.value)),
            log_level=get("LOG_LEVEL", cls.log_level).lower(),
        )
