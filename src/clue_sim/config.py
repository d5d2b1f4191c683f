"""
Settings for the Clue simulator, read from the environment (and .env).
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from clue_sim.errors import ClueError

DEFAULT_LLM_MODEL = "gemini/gemini-2.0-flash"

TRUTHY = ("1", "true", "yes", "on")


def _flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUTHY


def _int(environ: Mapping[str, str], name: str) -> Optional[int]:
    value = environ.get(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ClueError(f"{name} must be a whole number, got '{value}'") from None


@dataclass
class Settings:
    """
    Runtime options.

    Attributes:
        debug: DEBUG logging and stack traces (CLUE_DEBUG)
        seed: Seed for the game's random source (CLUE_SEED)
        ai_only: Keep playing after every human is out (CLUE_AI_ONLY)
        max_turns: Stop after this many turns (CLUE_MAX_TURNS)
        deduce: Process of elimination after each guess (CLUE_DEDUCE, on by default)
        moderator: Narrate the game with an LLM moderator (CLUE_MODERATOR)
        llm_model: Model used by the moderator (CLUE_LLM_MODEL)
        google_api_key: Key for the moderator's model (GOOGLE_API_KEY)
    """
    debug: bool = False
    seed: Optional[int] = None
    ai_only: bool = False
    max_turns: Optional[int] = None
    deduce: bool = True
    moderator: bool = False
    llm_model: str = DEFAULT_LLM_MODEL
    google_api_key: Optional[str] = None

    @property
    def moderator_enabled(self) -> bool:
        return self.moderator and bool(self.google_api_key)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables."""
    environ = os.environ if environ is None else environ
    max_turns = _int(environ, "CLUE_MAX_TURNS")
    if max_turns is not None and max_turns < 1:
        raise ClueError("CLUE_MAX_TURNS must be at least 1")
    return Settings(
        debug=_flag(environ, "CLUE_DEBUG"),
        seed=_int(environ, "CLUE_SEED"),
        ai_only=_flag(environ, "CLUE_AI_ONLY"),
        max_turns=max_turns,
        deduce=_flag(environ, "CLUE_DEDUCE", default=True),
        moderator=_flag(environ, "CLUE_MODERATOR"),
        llm_model=environ.get("CLUE_LLM_MODEL") or DEFAULT_LLM_MODEL,
        google_api_key=environ.get("GOOGLE_API_KEY") or None,
    )
