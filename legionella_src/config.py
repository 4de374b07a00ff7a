"""Configuration for the Legionella UFC calculator."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Find and load .env file
_env_candidates = [
    Path(__file__).parent.parent / ".env",
    Path(__file__).parent.parent / ".env.template",
]

for env_path in _env_candidates:
    if env_path.exists():
        load_dotenv(env_path)
        break


class Config:
    """Legionella UFC calculator configuration."""

    # --- Sample Sheet ---
    # Sample types shown on the bench sheet, in display order
    SAMPLE_TYPES: list[str] = [
        t.strip() for t in os.getenv("SAMPLE_TYPES", "A,B,C,D,E").split(",") if t.strip()
    ]

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def get_log_level(cls) -> int:
        """Logging level from LOG_LEVEL, INFO if the name is unknown."""
        level = logging.getLevelName(cls.LOG_LEVEL)
        return level if isinstance(level, int) else logging.INFO


# Module-level convenience instance
config = Config()
