#backend/config.py

import math
import os

from dotenv import load_dotenv
load_dotenv()


def _float(name: str, default: float) -> float:
    try:
        value = float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# Hugging Face inference API (optional key)
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY", "")
HF_API_URL = os.getenv("HF_API_URL", "https://api-inference.huggingface.co").rstrip("/")
HF_TIMEOUT_SECONDS = _float("HF_TIMEOUT_SECONDS", 10.0)
HF_MAX_RETRIES = _int("HF_MAX_RETRIES", 2)

# "huggingface" (remote inference) or "local" (sentence-transformers)
EMBEDDING_BACKEND = os.getenv("EMBEDDING_BACKEND", "huggingface").strip().lower()

# Ranking defaults
TRENDING_DECAY_PER_HOUR = _float("TRENDING_DECAY_PER_HOUR", 0.05)
TRENDING_DEFAULT_LIMIT = _int("TRENDING_DEFAULT_LIMIT", 50)
TRENDING_DEFAULT_WINDOW_DAYS = _int("TRENDING_DEFAULT_WINDOW_DAYS", 7)
RELATED_DEFAULT_LIMIT = _int("RELATED_DEFAULT_LIMIT", 20)
TAG_SUGGESTION_LIMIT = _int("TAG_SUGGESTION_LIMIT", 5)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
