"""
Observation session configuration.

Policy knobs for the session state machine and reflection engine.
All settings can be overridden via environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


@dataclass
class ObservationSettings:
    """Configuration for observation sessions."""

    # Focus token policy. Whether tokens refresh at halftime is a
    # configuration decision, not session state.
    refill_tokens_at_halftime: bool = field(
        default_factory=lambda: _env_bool("SCOUTBOOK_REFILL_AT_HALFTIME", "true")
    )

    # Flagging
    flags_per_phase: int = field(
        default_factory=lambda: _env_int("SCOUTBOOK_FLAGS_PER_PHASE", "1")
    )

    # Reflection
    gut_feeling_flag_threshold: int = field(
        default_factory=lambda: _env_int("SCOUTBOOK_GUT_FEELING_THRESHOLD", "2")
    )
    max_reflection_prompts: int = 4

    @classmethod
    def from_env(cls) -> "ObservationSettings":
        """Create settings from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.flags_per_phase < 1:
            errors.append("SCOUTBOOK_FLAGS_PER_PHASE must be at least 1")
        if self.gut_feeling_flag_threshold < 1:
            errors.append("SCOUTBOOK_GUT_FEELING_THRESHOLD must be at least 1")
        if not 2 <= self.max_reflection_prompts <= 4:
            errors.append("max_reflection_prompts must be between 2 and 4")
        return errors


# Singleton settings instance
_settings: Optional[ObservationSettings] = None


def get_settings() -> ObservationSettings:
    """Get the global observation settings."""
    global _settings
    if _settings is None:
        _settings = ObservationSettings.from_env()
    return _settings


def set_settings(settings: ObservationSettings) -> None:
    """
    Replace the global settings.

    Useful for testing or runtime toggling.
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
