# prompt_studio_service/app/vertex_ai_client.py
import logging
from google import genai
from .config import settings

logger = logging.getLogger(__name__)
_genai_client: genai.Client | None = None


def genai_credentials_available() -> bool:
    return bool(settings.GEMINI_API_KEY) or bool(
        settings.GCP_PROJECT_ID and settings.GCP_REGION
    )


def get_genai_client() -> genai.Client:
    """
    Builds the shared GenAI client once. An API key selects the Gemini Developer API,
    otherwise Vertex AI is used with the configured project and location.
    """
    global _genai_client
    if _genai_client is None:
        try:
            if settings.GEMINI_API_KEY:
                _genai_client = genai.Client(api_key=settings.GEMINI_API_KEY)
                logger.info("GenAI client initialized with Gemini API key.")
            elif settings.GCP_PROJECT_ID and settings.GCP_REGION:
                _genai_client = genai.Client(
                    vertexai=True,
                    project=settings.GCP_PROJECT_ID,
                    location=settings.GCP_REGION,
                )
                logger.info("Vertex AI GenAI client initialized successfully.")
            else:
                raise ValueError(
                    "Set GEMINI_API_KEY, or GOOGLE_CLOUD_PROJECT and GOOGLE_CLOUD_LOCATION, to enable the generative service."
                )
        except Exception as e:
            logger.error(
                f"Could not initialize GenAI client. Error: {e}",
                exc_info=True,
            )
            raise
    return _genai_client
