# prompt_studio_service/app/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Generative service credentials. GEMINI_API_KEY takes precedence over Vertex AI.
    GCP_PROJECT_ID: str | None = os.getenv("GOOGLE_CLOUD_PROJECT")
    GCP_REGION: str | None = os.getenv("GOOGLE_CLOUD_LOCATION")
    GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")

    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.8"))
    LLM_MAX_OUTPUT_TOKENS: int = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2048"))

    # Story expansion and optimization use the stronger model,
    # suggestions/analysis/variations the cheaper one.
    STORY_GEMINI_MODEL_NAME: str = os.getenv(
        "STORY_GEMINI_MODEL_NAME", "gemini-2.5-flash"
    )
    FAST_GEMINI_MODEL_NAME: str = os.getenv(
        "FAST_GEMINI_MODEL_NAME", "gemini-2.5-flash-lite"
    )

    # Request gate (network entry point only)
    RATE_LIMIT_WINDOW_SECONDS: float = float(
        os.getenv("RATE_LIMIT_WINDOW_SECONDS", "10")
    )
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "5"))
    CACHE_TTL_SECONDS: float = float(os.getenv("CACHE_TTL_SECONDS", "60"))

    # Environment routing
    # Base URL of the intermediary endpoint, e.g. "https://studio.example.com".
    # Unset (or STATIC_BUILD=true) means no server-side endpoints are reachable.
    REMOTE_ENDPOINT_BASE_URL: str | None = os.getenv("REMOTE_ENDPOINT_BASE_URL")
    STATIC_BUILD: bool = _env_flag("STATIC_BUILD")
    ROUTE_TIMEOUT_SECONDS: float = float(os.getenv("ROUTE_TIMEOUT_SECONDS", "20"))


settings = Settings()
