# prompt_studio_service/app/routes/direct_adapter_route.py
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from ..models import (
    CinematicElements,
    MagicStoryResult,
    OptimizationResult,
    PromptAnalysis,
    VideoModel,
)
from ..services.generative_adapter import GenerativeServiceAdapter, GenerativeServiceError
from ..services.templates import render_story_prompt
from ..vertex_ai_client import get_genai_client
from .interface import PromptRoute, RouteUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

AdapterFactory = Callable[[], GenerativeServiceAdapter]


def default_adapter_factory() -> GenerativeServiceAdapter:
    return GenerativeServiceAdapter(get_genai_client())


class DirectAdapterRoute(PromptRoute):
    """Calls the generative service directly, without the intermediary endpoint."""

    name = "direct-adapter"

    def __init__(self, adapter_factory: AdapterFactory, timeout: float):
        self.adapter_factory = adapter_factory
        self.timeout = timeout

    def _adapter(self) -> GenerativeServiceAdapter:
        try:
            return self.adapter_factory()
        except Exception as e:
            logger.warning(f"Generative service credentials unavailable: {e}")
            raise RouteUnavailable(f"Generative service unavailable: {e}")

    async def _call(
        self, operation: str, call: Callable[[GenerativeServiceAdapter], Awaitable[T]]
    ) -> T:
        adapter = self._adapter()
        try:
            return await asyncio.wait_for(call(adapter), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Generative service timed out after {self.timeout}s on {operation}.")
            raise RouteUnavailable(f"{operation} timed out")
        except GenerativeServiceError as e:
            raise RouteUnavailable(f"{operation} failed: {e}")

    async def suggestions(self, partial_input: str) -> List[str]:
        return await self._call(
            "suggestions", lambda adapter: adapter.generate_suggestions(partial_input)
        )

    async def analyze(self, prompt: str) -> Optional[PromptAnalysis]:
        return await self._call("analyze", lambda adapter: adapter.analyze_prompt(prompt))

    async def refine(self, prompt: str, model: str) -> str:
        refinements = await self._call(
            "refine", lambda adapter: adapter.refine_prompt(prompt, model)
        )
        if not refinements:
            raise RouteUnavailable("refine returned no refinements")
        return refinements[0]

    async def optimize(
        self, idea: str, model: VideoModel, current_prompt: Optional[str] = None
    ) -> Optional[OptimizationResult]:
        return await self._call(
            "optimize",
            lambda adapter: adapter.optimize_prompt(idea, model, current_prompt),
        )

    async def magic_story(self, word: str, model: VideoModel) -> MagicStoryResult:
        story = await self._call(
            "magic_story", lambda adapter: adapter.expand_word_to_story(word, model)
        )
        return render_story_prompt(story, model)

    async def story_variations(self, story: str, model: str) -> List[str]:
        return await self._call(
            "story_variations",
            lambda adapter: adapter.generate_story_variations(story, model),
        )

    async def cinematic_elements(
        self, story_context: str, model: VideoModel
    ) -> Optional[CinematicElements]:
        return await self._call(
            "cinematic_elements",
            lambda adapter: adapter.generate_cinematic_elements(story_context, model),
        )
