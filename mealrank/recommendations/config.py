from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RankingConfig:
    cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "300"))
    max_recommendations: int = int(os.getenv("MAX_RECOMMENDATIONS", "20"))
    diversity_window: int = int(os.getenv("DIVERSITY_WINDOW", "20"))
    walking_speed_mps: float = float(os.getenv("WALKING_SPEED_MPS", "1.4"))
    preference_load_timeout: float = float(os.getenv("PREFERENCE_LOAD_TIMEOUT", "0.3"))
    creator_repeat_threshold: int = 2


DEFAULT_RANKING_CONFIG = RankingConfig()
