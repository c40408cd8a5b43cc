import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from prompt_studio_service.app import main
from prompt_studio_service.app.services.generative_adapter import GenerativeServiceAdapter
from prompt_studio_service.app.services.request_gate import InMemoryGateStore, RequestGate


class FakeModels:
    """Stands in for `client.aio.models`; replays queued texts or raises queued exceptions."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.responses:
            raise RuntimeError("no fake response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(text=response, prompt_feedback=None)


class FakeGenaiClient:
    def __init__(self, *responses):
        self.models = FakeModels(responses)
        self.aio = SimpleNamespace(models=self.models)


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingRender:
    def __init__(self):
        from prompt_studio_service.app.services.templates import render_prompt

        self._render = render_prompt
        self.count = 0

    def __call__(self, *args, **kwargs):
        self.count += 1
        return self._render(*args, **kwargs)


class SlowAdapter:
    """Adapter whose calls outlast any short deadline."""

    def __init__(self, delay=1.0):
        self.delay = delay

    async def generate_suggestions(self, partial_input):
        await asyncio.sleep(self.delay)
        return ["too late"]

    async def analyze_prompt(self, prompt):
        await asyncio.sleep(self.delay)
        raise AssertionError("deadline was not enforced")


def make_adapter(*responses):
    return GenerativeServiceAdapter(FakeGenaiClient(*responses))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def counting_render():
    return CountingRender()


@pytest.fixture
def gate(clock, counting_render):
    return RequestGate(
        InMemoryGateStore(),
        render=counting_render,
        window_seconds=10,
        max_requests=5,
        ttl_seconds=60,
        clock=clock,
    )


@pytest.fixture
def api_client(gate):
    """TestClient with an isolated gate and no generative service configured."""
    main.app.dependency_overrides[main.get_request_gate] = lambda: gate
    main.app.dependency_overrides[main.get_generative_adapter] = lambda: None
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def use_adapter():
    """Installs a fake-backed adapter for the API under test: use_adapter(text1, text2, ...)."""

    def install(*responses):
        adapter = make_adapter(*responses)
        main.app.dependency_overrides[main.get_generative_adapter] = lambda: adapter
        return adapter

    return install
