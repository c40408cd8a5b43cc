# prompt_studio_service/app/routes/local_fallback_route.py
import logging
from typing import List, Optional

from ..models import (
    CinematicElements,
    MagicStoryResult,
    OptimizationResult,
    PromptAnalysis,
    VideoModel,
)
from ..services import story_library
from ..services.templates import render_story_prompt
from .interface import PromptRoute

logger = logging.getLogger(__name__)


class LocalFallbackRoute(PromptRoute):
    """
    Last route in every chain; never raises. Enrichment operations answer with an
    explicit "unavailable" value, magic mode with the offline story library.
    """

    name = "local-fallback"

    async def suggestions(self, partial_input: str) -> List[str]:
        return []

    async def analyze(self, prompt: str) -> Optional[PromptAnalysis]:
        return None

    async def refine(self, prompt: str, model: str) -> str:
        return prompt

    async def optimize(
        self, idea: str, model: VideoModel, current_prompt: Optional[str] = None
    ) -> Optional[OptimizationResult]:
        return None

    async def magic_story(self, word: str, model: VideoModel) -> MagicStoryResult:
        logger.info(f"Expanding '{word}' with the offline story library.")
        return render_story_prompt(story_library.expand(word, model), model)

    async def story_variations(self, story: str, model: str) -> List[str]:
        return []

    async def cinematic_elements(
        self, story_context: str, model: VideoModel
    ) -> Optional[CinematicElements]:
        return None
