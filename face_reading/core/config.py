# face_reading/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from face_reading.core.errors import ConfigurationError

# Load .env file
load_dotenv()

# Debug mode (verbose logs)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Classifier (Hugging Face inference) Config
CLASSIFIER_MODE = os.getenv("CLASSIFIER_MODE", "http").lower()
HF_EXPRESSION_MODEL_URL = os.getenv(
    "HF_EXPRESSION_MODEL_URL",
    "https://api-inference.huggingface.co/models/nateraw/vision-transformer-emotion-ferplus",
)
HF_AGE_MODEL_URL = os.getenv(
    "HF_AGE_MODEL_URL",
    "https://api-inference.huggingface.co/models/nateraw/vision-transformer-age-classifier",
)
CLASSIFIER_HTTP_TIMEOUT_SECONDS = float(os.getenv("CLASSIFIER_HTTP_TIMEOUT_SECONDS", "20"))

# Used only when CLASSIFIER_MODE=mock
MOCK_EXPRESSION_LABEL = os.getenv("MOCK_EXPRESSION_LABEL", "happiness")

# Narrative generator Config
NARRATIVE_PROVIDER = os.getenv("NARRATIVE_PROVIDER", "together").lower()
TOGETHER_URL = os.getenv("TOGETHER_URL", "https://api.together.xyz/v1/chat/completions")
TOGETHER_MODEL = os.getenv("TOGETHER_MODEL", "meta-llama/Llama-3.3-70B-Instruct-Turbo-Free")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
NARRATIVE_MAX_TOKENS = int(os.getenv("NARRATIVE_MAX_TOKENS", "700"))
NARRATIVE_TEMPERATURE = float(os.getenv("NARRATIVE_TEMPERATURE", "0.7"))
NARRATIVE_TOP_P = float(os.getenv("NARRATIVE_TOP_P", "0.9"))
NARRATIVE_HTTP_TIMEOUT_SECONDS = float(os.getenv("NARRATIVE_HTTP_TIMEOUT_SECONDS", "45"))

# Admission / cache windows
RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "6"))
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "600"))

SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))


@dataclass(frozen=True)
class Credentials:
    classifier_token: Optional[str]
    narrative_token: str


def resolve_credentials() -> Credentials:
    """
    Reads upstream tokens from the environment on every request.
    Missing tokens raise ConfigurationError (HTTP 500) before any upstream call.
    """
    missing: List[str] = []

    classifier_token = os.getenv("HF_TOKEN")
    if CLASSIFIER_MODE == "http" and not classifier_token:
        missing.append("HF_TOKEN")

    if NARRATIVE_PROVIDER == "gemini":
        narrative_token = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        if not narrative_token:
            missing.append("GEMINI_API_KEY (or GOOGLE_API_KEY)")
    else:
        narrative_token = os.getenv("TOGETHER_API_KEY")
        if not narrative_token:
            missing.append("TOGETHER_API_KEY")

    if missing:
        raise ConfigurationError(
            "Konfigurasi API belum lengkap. Tambahkan "
            + " dan ".join(missing)
            + " pada environment."
        )

    return Credentials(classifier_token=classifier_token, narrative_token=narrative_token)
