"""
Agent configuration.

The engine never reads the process environment itself: callers build an
AgentConfig (usually via AgentConfig.from_env()) and pass it in. An empty
api_key selects the deterministic demo analysis instead of the AI path.

Environment variables:
  ANTHROPIC_API_KEY   Anthropic credential; absent or blank selects demo mode
  PRISMO_MODEL        Model name for the AI path
  PRISMO_MAX_TOKENS   Response token budget for the AI path
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 8192


class AgentConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = Field(default=None, repr=False)
    model: str = Field(default=DEFAULT_MODEL, min_length=1)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AgentConfig":
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get("ANTHROPIC_API_KEY") or None,
            model=env.get("PRISMO_MODEL") or DEFAULT_MODEL,
            max_tokens=env.get("PRISMO_MAX_TOKENS") or DEFAULT_MAX_TOKENS,
        )

    def without_credentials(self) -> "AgentConfig":
        return self.model_copy(update={"api_key": None})
