# prompt_studio_service/app/services/environment_router.py
"""
Chooses, per operation, how an AI-assisted request is served:

    remote (intermediary endpoint) -> direct adapter call -> local fallback

The remote route is tried only when the deployment probe reports server-side
endpoints. The probe is consulted on every call, because the same build can
run as a static site or behind a server.
"""
import logging
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar

import httpx

from ..config import settings
from ..models import (
    CinematicElements,
    GeneratedPrompt,
    MagicStoryResult,
    OptimizationResult,
    PromptAnalysis,
    PromptRequest,
    VideoModel,
)
from ..routes.direct_adapter_route import (
    AdapterFactory,
    DirectAdapterRoute,
    default_adapter_factory,
)
from ..routes.interface import PromptRoute, PromptValidationError, RouteUnavailable
from ..routes.local_fallback_route import LocalFallbackRoute
from ..routes.remote_route import RemoteRoute
from .request_gate import RateLimitExceeded
from .templates import render_prompt

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_SUGGESTION_INPUT_LENGTH = 3


class MagicModeUnavailable(Exception):
    pass


class DeploymentProbe(Protocol):
    def is_server_capable(self) -> bool:
        """True when the intermediary endpoint is expected to exist."""
        ...


class SettingsDeploymentProbe(DeploymentProbe):
    def is_server_capable(self) -> bool:
        return bool(settings.REMOTE_ENDPOINT_BASE_URL) and not settings.STATIC_BUILD


class EnvironmentRouter:
    def __init__(
        self,
        probe: Optional[DeploymentProbe] = None,
        remote_base_url: Optional[str] = None,
        adapter_factory: AdapterFactory = default_adapter_factory,
        timeout: float = settings.ROUTE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.probe = probe or SettingsDeploymentProbe()
        self.remote_base_url = remote_base_url
        self.timeout = timeout
        self.transport = transport
        self.direct_route = DirectAdapterRoute(adapter_factory, timeout)
        self.local_route = LocalFallbackRoute()

    def _remote_route(self) -> Optional[RemoteRoute]:
        if not self.probe.is_server_capable():
            return None
        base_url = self.remote_base_url or settings.REMOTE_ENDPOINT_BASE_URL
        if not base_url:
            logger.warning("Deployment reports server endpoints but no base URL is configured.")
            return None
        return RemoteRoute(base_url, self.timeout, transport=self.transport)

    def routes(self) -> List[PromptRoute]:
        chain: List[PromptRoute] = []
        remote = self._remote_route()
        if remote is not None:
            chain.append(remote)
        chain.append(self.direct_route)
        chain.append(self.local_route)
        return chain

    async def _run(
        self, operation: str, call: Callable[[PromptRoute], Awaitable[T]]
    ) -> T:
        chain = self.routes()
        for route in chain:
            try:
                result = await call(route)
                logger.debug(f"{operation} served by the {route.name} route.")
                return result
            except RouteUnavailable as e:
                logger.warning(
                    f"{operation}: {route.name} route unavailable ({e}). Downgrading."
                )
        raise RouteUnavailable(
            f"{operation}: no route could answer ({', '.join(r.name for r in chain)})"
        )

    async def render(self, request: PromptRequest) -> GeneratedPrompt:
        """
        Template-only render. Goes through the network entry point when there is one,
        so its rate limit and cache apply; otherwise renders in-process.
        """
        remote = self._remote_route()
        if remote is not None:
            try:
                return await remote.render(request)
            except RouteUnavailable as e:
                if e.status_code == 429:
                    raise RateLimitExceeded("remote", retry_after=0.0)
                if e.status_code == 400:
                    raise PromptValidationError(str(e))
                logger.warning(f"render: remote route unavailable ({e}). Rendering locally.")
        return render_prompt(request.idea, request.model, request.fragment_overrides())

    async def suggestions(self, partial_input: str) -> List[str]:
        if len(partial_input) < MIN_SUGGESTION_INPUT_LENGTH:
            return []
        return await self._run(
            "suggestions", lambda route: route.suggestions(partial_input)
        )

    async def analyze(self, prompt: str) -> Optional[PromptAnalysis]:
        if not prompt:
            return None
        return await self._run("analyze", lambda route: route.analyze(prompt))

    async def refine(self, prompt: str, model: str) -> str:
        if not prompt:
            return prompt
        return await self._run("refine", lambda route: route.refine(prompt, model))

    async def optimize(
        self, idea: str, model: VideoModel, current_prompt: Optional[str] = None
    ) -> Optional[OptimizationResult]:
        if not idea:
            return None
        return await self._run(
            "optimize", lambda route: route.optimize(idea, model, current_prompt)
        )

    async def magic_story(self, word: str, model: VideoModel) -> MagicStoryResult:
        if not word or not word.strip():
            raise PromptValidationError("Word is required for Magic Mode")
        try:
            return await self._run(
                "magic_story", lambda route: route.magic_story(word, model)
            )
        except RouteUnavailable as e:
            # The local route always answers, so reaching this is a routing bug.
            logger.error(f"Magic Mode failed on every route: {e}", exc_info=True)
            raise MagicModeUnavailable("Magic Mode unavailable in current environment")

    async def story_variations(self, story: str, model: str) -> List[str]:
        if not story:
            return []
        return await self._run(
            "story_variations", lambda route: route.story_variations(story, model)
        )

    async def cinematic_elements(
        self, story_context: str, model: VideoModel
    ) -> Optional[CinematicElements]:
        if not story_context:
            return None
        return await self._run(
            "cinematic_elements",
            lambda route: route.cinematic_elements(story_context, model),
        )
