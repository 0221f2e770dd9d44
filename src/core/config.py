"""Process configuration, read from environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Self

ENV_PREFIX = "COOLDOWN_CHESS_"
TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    # Store the position the proposer sends along instead of deriving it from the move
    trust_client_position: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
            trust_client_position=env.get(
                f"{ENV_PREFIX}TRUST_CLIENT_POSITION", ""
            ).lower()
            in TRUTHY,
        )
