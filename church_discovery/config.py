from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class EngineConfig:
    catalog_path: Path = Path(
        os.getenv("CATALOG_PATH", str(_PACKAGE_DIR / "data" / "venues.csv"))
    )
    preferences_dir: Path | None = (
        Path(os.environ["PREFERENCES_DIR"]) if os.getenv("PREFERENCES_DIR") else None
    )
    default_rank_limit: int = int(os.getenv("DEFAULT_RANK_LIMIT", "10"))
    default_suggestion_limit: int = int(os.getenv("DEFAULT_SUGGESTION_LIMIT", "5"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


DEFAULT_ENGINE_CONFIG = EngineConfig()
