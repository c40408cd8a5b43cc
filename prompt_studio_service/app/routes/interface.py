# prompt_studio_service/app/routes/interface.py
from typing import List, Optional, Protocol

from ..models import (
    CinematicElements,
    MagicStoryResult,
    OptimizationResult,
    PromptAnalysis,
    VideoModel,
)


class RouteUnavailable(Exception):
    """A route could not answer; the router moves on to the next one."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PromptValidationError(Exception):
    pass


class PromptRoute(Protocol):
    name: str

    async def suggestions(self, partial_input: str) -> List[str]: ...

    async def analyze(self, prompt: str) -> Optional[PromptAnalysis]: ...

    async def refine(self, prompt: str, model: str) -> str: ...

    async def optimize(
        self, idea: str, model: VideoModel, current_prompt: Optional[str] = None
    ) -> Optional[OptimizationResult]: ...

    async def magic_story(self, word: str, model: VideoModel) -> MagicStoryResult: ...

    async def story_variations(self, story: str, model: str) -> List[str]: ...

    async def cinematic_elements(
        self, story_context: str, model: VideoModel
    ) -> Optional[CinematicElements]:
        """
        Derives style fragments for a story. Raises RouteUnavailable on any failure.
        """
        ...
