# prompt_studio_service/app/routes/remote_route.py
import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from ..models import (
    AnalysisResponse,
    CinematicElements,
    CinematicElementsResponse,
    GeneratedPrompt,
    MagicStoryResponse,
    MagicStoryResult,
    OptimizationResponse,
    OptimizationResult,
    PromptAnalysis,
    PromptRequest,
    RefineResponse,
    StoryVariationsResponse,
    SuggestionsResponse,
    VideoModel,
)
from .interface import PromptRoute, RouteUnavailable

logger = logging.getLogger(__name__)


def _wire_model(model: Union[VideoModel, str]) -> str:
    # Unknown names are sent as-is; the endpoint rejects them and the router moves on.
    return model.value if isinstance(model, VideoModel) else str(model)


class RemoteRoute(PromptRoute):
    """Calls the intermediary endpoint (this service deployed server-side) over HTTP."""

    name = "remote"

    def __init__(
        self,
        base_url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _send(self, url: str, payload: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            return response.json()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            # The httpx timeout bounds each phase; this bounds the whole exchange.
            body = await asyncio.wait_for(self._send(url, payload), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Intermediary endpoint {url} timed out after {self.timeout}s.")
            raise RouteUnavailable(f"{path} timed out")
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Intermediary endpoint {url} answered {e.response.status_code}: {e.response.text[:200]}"
            )
            raise RouteUnavailable(
                f"{path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            logger.warning(f"Intermediary endpoint {url} unreachable: {e!r}")
            raise RouteUnavailable(f"{path} unreachable: {e!r}")
        except ValueError as e:
            logger.warning(f"Intermediary endpoint {url} returned a non-JSON body: {e}")
            raise RouteUnavailable(f"{path} returned a non-JSON body")

        if not isinstance(body, dict):
            raise RouteUnavailable(f"{path} returned an unexpected payload")
        if body.get("note"):
            logger.info(f"Intermediary endpoint {path} answered in degraded mode: {body['note']}")
        return body

    async def _post_model(self, path: str, payload: Dict[str, Any], response_model):
        body = await self._post(path, payload)
        try:
            return response_model.model_validate(body)
        except ValidationError as e:
            logger.warning(f"Intermediary endpoint {path} payload invalid: {e}")
            raise RouteUnavailable(f"{path} returned an invalid payload")

    async def render(self, request: PromptRequest) -> GeneratedPrompt:
        payload = request.model_dump(by_alias=True, exclude_none=True, mode="json")
        return await self._post_model("/api/prompt", payload, GeneratedPrompt)

    async def suggestions(self, partial_input: str) -> List[str]:
        response = await self._post_model(
            "/api/suggestions", {"input": partial_input}, SuggestionsResponse
        )
        return response.suggestions

    async def analyze(self, prompt: str) -> Optional[PromptAnalysis]:
        response = await self._post_model(
            "/api/analyze", {"prompt": prompt}, AnalysisResponse
        )
        return PromptAnalysis(score=response.score, feedback=response.feedback)

    async def refine(self, prompt: str, model: str) -> str:
        response = await self._post_model(
            "/api/refine", {"prompt": prompt, "model": model}, RefineResponse
        )
        return response.refined_prompt or prompt

    async def optimize(
        self, idea: str, model: VideoModel, current_prompt: Optional[str] = None
    ) -> Optional[OptimizationResult]:
        payload = {"idea": idea, "model": _wire_model(model)}
        if current_prompt:
            payload["currentPrompt"] = current_prompt
        response = await self._post_model("/api/optimize", payload, OptimizationResponse)
        return OptimizationResult.model_validate(response.model_dump(exclude={"note"}))

    async def magic_story(self, word: str, model: VideoModel) -> MagicStoryResult:
        response = await self._post_model(
            "/api/magic-story",
            {"word": word, "model": _wire_model(model)},
            MagicStoryResponse,
        )
        return MagicStoryResult(story=response.story, prompt=response.prompt)

    async def story_variations(self, story: str, model: str) -> List[str]:
        response = await self._post_model(
            "/api/story-variations",
            {"story": story, "model": model},
            StoryVariationsResponse,
        )
        return response.variations

    async def cinematic_elements(
        self, story_context: str, model: VideoModel
    ) -> Optional[CinematicElements]:
        response = await self._post_model(
            "/api/cinematic-elements",
            {"storyContext": story_context, "model": _wire_model(model)},
            CinematicElementsResponse,
        )
        return CinematicElements.model_validate(response.model_dump(exclude={"note"}))
