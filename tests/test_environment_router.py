import asyncio
import json

import httpx
import pytest

from prompt_studio_service.app.config import settings
from prompt_studio_service.app.models import PromptRequest, VideoModel
from prompt_studio_service.app.routes.interface import PromptValidationError
from prompt_studio_service.app.services.environment_router import (
    EnvironmentRouter,
    SettingsDeploymentProbe,
)
from prompt_studio_service.app.services.request_gate import RateLimitExceeded
from prompt_studio_service.app.services.templates import render_prompt

from conftest import SlowAdapter, make_adapter

BASE_URL = "http://intermediary.test"


class FakeProbe:
    def __init__(self, server_capable=True):
        self.server_capable = server_capable
        self.calls = 0

    def is_server_capable(self):
        self.calls += 1
        return self.server_capable


class RecordingHandler:
    """httpx.MockTransport handler answering every request with one status and body."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


def _no_credentials():
    raise ValueError("GenAI client not configured")


def _router(probe, handler=None, adapter_factory=_no_credentials):
    transport = httpx.MockTransport(handler or RecordingHandler(503))
    return EnvironmentRouter(
        probe=probe,
        remote_base_url=BASE_URL,
        adapter_factory=adapter_factory,
        timeout=1.0,
        transport=transport,
    )


def test_remote_route_serves_when_server_capable():
    handler = RecordingHandler(200, {"suggestions": ["a", "b"]})
    router = _router(FakeProbe(), handler)

    assert asyncio.run(router.suggestions("koi pond")) == ["a", "b"]
    assert handler.requests[0].url.path == "/api/suggestions"
    assert json.loads(handler.requests[0].content) == {"input": "koi pond"}


def test_remote_failure_downgrades_to_direct_adapter():
    adapter = make_adapter("one\ntwo")
    router = _router(FakeProbe(), RecordingHandler(500), adapter_factory=lambda: adapter)

    assert asyncio.run(router.story_variations("a story", "flow")) == ["one", "two"]


def test_static_build_skips_remote_route():
    handler = RecordingHandler(200, {"refinedPrompt": "from remote"})
    adapter = make_adapter("refined locally\nsecond")
    router = _router(FakeProbe(server_capable=False), handler, adapter_factory=lambda: adapter)

    assert asyncio.run(router.refine("a prompt", "veo3")) == "refined locally"
    assert handler.requests == []


def test_missing_credentials_fall_through_to_local_route():
    router = _router(FakeProbe(server_capable=False))

    assert asyncio.run(router.suggestions("koi pond")) == []
    assert asyncio.run(router.analyze("a prompt")) is None
    assert asyncio.run(router.refine("a prompt", "flow")) == "a prompt"
    assert asyncio.run(router.optimize("an idea", VideoModel.FLOW)) is None
    assert asyncio.run(router.cinematic_elements("a story", VideoModel.PIKA)) is None


def test_adapter_failure_falls_through_to_local_route():
    adapter = make_adapter(RuntimeError("quota exceeded"))
    router = _router(FakeProbe(), adapter_factory=lambda: adapter)

    assert asyncio.run(router.story_variations("a story", "flow")) == []


def test_magic_story_falls_back_to_story_library():
    router = _router(FakeProbe())

    result = asyncio.run(router.magic_story("cat", VideoModel.VEO3))
    assert result.story.full_story.startswith("A curious tabby cat")
    assert result.story.full_story in result.prompt.assembled_prompt


def test_magic_story_rejects_blank_word():
    router = _router(FakeProbe())
    with pytest.raises(PromptValidationError):
        asyncio.run(router.magic_story("   ", VideoModel.FLOW))


def test_probe_is_consulted_on_every_call():
    probe = FakeProbe(server_capable=False)
    router = _router(probe)

    asyncio.run(router.suggestions("koi pond"))
    asyncio.run(router.suggestions("koi pond"))
    assert probe.calls == 2


def test_short_or_empty_input_never_reaches_a_route():
    handler = RecordingHandler(200, {"suggestions": ["x"]})
    probe = FakeProbe()
    router = _router(probe, handler)

    assert asyncio.run(router.suggestions("ab")) == []
    assert asyncio.run(router.analyze("")) is None
    assert asyncio.run(router.refine("", "flow")) == ""
    assert asyncio.run(router.optimize("", VideoModel.FLOW)) is None
    assert asyncio.run(router.story_variations("", "flow")) == []
    assert asyncio.run(router.cinematic_elements("", VideoModel.FLOW)) is None
    assert handler.requests == []
    assert probe.calls == 0


def test_render_uses_remote_entry_point():
    remote_result = render_prompt("a red balloon", VideoModel.PIKA)
    handler = RecordingHandler(200, remote_result.model_dump(by_alias=True))
    router = _router(FakeProbe(), handler)

    result = asyncio.run(router.render(PromptRequest(idea="a red balloon", model=VideoModel.PIKA)))
    assert result == remote_result
    assert handler.requests[0].url.path == "/api/prompt"
    assert json.loads(handler.requests[0].content) == {"idea": "a red balloon", "model": "pika"}


def test_render_maps_remote_rejections():
    rate_limited = _router(FakeProbe(), RecordingHandler(429, {"message": "Too many requests."}))
    with pytest.raises(RateLimitExceeded):
        asyncio.run(rate_limited.render(PromptRequest(idea="a red balloon", model=VideoModel.PIKA)))

    invalid = _router(FakeProbe(), RecordingHandler(400, {"message": "Invalid input"}))
    with pytest.raises(PromptValidationError):
        asyncio.run(invalid.render(PromptRequest(idea="a red balloon", model=VideoModel.PIKA)))


def test_render_falls_back_to_local_template_when_remote_is_down():
    router = _router(FakeProbe(), RecordingHandler(503))
    request = PromptRequest(idea="a red balloon", model=VideoModel.RUNWAY, visual_style="anime")

    result = asyncio.run(router.render(request))
    assert result == render_prompt("a red balloon", VideoModel.RUNWAY, {"visual_style": "anime"})


@pytest.mark.parametrize(
    "base_url, static_build, expected",
    [
        ("https://studio.test", False, True),
        ("https://studio.test", True, False),
        (None, False, False),
    ],
)
def test_settings_probe_reads_deployment_settings(monkeypatch, base_url, static_build, expected):
    monkeypatch.setattr(settings, "REMOTE_ENDPOINT_BASE_URL", base_url)
    monkeypatch.setattr(settings, "STATIC_BUILD", static_build)
    assert SettingsDeploymentProbe().is_server_capable() is expected


def test_unknown_model_downgrades_instead_of_failing():
    handler = RecordingHandler(400, {"message": "Invalid input"})
    router = _router(FakeProbe(), handler)

    result = asyncio.run(router.magic_story("cat", "sora"))
    assert result.story.full_story.startswith("A curious tabby cat")
    assert asyncio.run(router.cinematic_elements("a story", "sora")) is None
    assert asyncio.run(router.optimize("an idea", "sora")) is None
    assert [json.loads(request.content)["model"] for request in handler.requests] == ["sora"] * 3


def test_slow_adapter_is_cut_off_by_route_timeout():
    router = EnvironmentRouter(
        probe=FakeProbe(server_capable=False),
        adapter_factory=lambda: SlowAdapter(),
        timeout=0.1,
    )
    assert asyncio.run(router.suggestions("koi pond")) == []


def test_slow_remote_is_cut_off_by_route_timeout():
    async def trickle(request):
        await asyncio.sleep(1.0)
        return httpx.Response(200, json={"suggestions": ["too late"]})

    router = EnvironmentRouter(
        probe=FakeProbe(),
        remote_base_url=BASE_URL,
        adapter_factory=_no_credentials,
        timeout=0.1,
        transport=httpx.MockTransport(trickle),
    )
    assert asyncio.run(router.suggestions("koi pond")) == []
