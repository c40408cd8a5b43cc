import json

import pytest

from prompt_studio_service.app import main
from prompt_studio_service.app.config import settings
from prompt_studio_service.app.services import local_fallbacks

from conftest import SlowAdapter


def test_prompt_endpoint_returns_camel_case_payload(api_client):
    response = api_client.post(
        "/api/prompt",
        json={"idea": "a cat playing with a ball of yarn", "model": "veo3", "visualStyle": "film noir"},
    )
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"rawTemplate", "assembledPrompt"}
    assert "Scene: A high-quality, cinematic shot of a cat playing with a ball of yarn." in body["assembledPrompt"]
    assert "Visual Style: film noir, 8k" in body["assembledPrompt"]


def test_prompt_endpoint_replaces_malformed_fragments_with_defaults(api_client):
    response = api_client.post(
        "/api/prompt",
        json={"idea": "a red balloon", "model": "veo3", "visualStyle": 123, "background": ["a", "list"]},
    )
    assert response.status_code == 200
    assembled = response.json()["assembledPrompt"]
    assert "Visual Style: cinematic, 8k" in assembled
    assert "Background: a neutral, out-of-focus background." in assembled


@pytest.mark.parametrize(
    "payload",
    [
        {"idea": "", "model": "veo3"},
        {"idea": "x" * 101, "model": "veo3"},
        {"idea": "a red balloon", "model": "sora"},
        {"model": "flow"},
    ],
)
def test_prompt_endpoint_rejects_invalid_input(api_client, payload):
    response = api_client.post("/api/prompt", json=payload)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid input"


def test_prompt_endpoint_only_accepts_post(api_client):
    assert api_client.get("/api/prompt").status_code == 405


def test_prompt_endpoint_rate_limits_per_caller(api_client):
    payload = {"idea": "a red balloon", "model": "pika"}
    for _ in range(5):
        assert api_client.post("/api/prompt", json=payload).status_code == 200
    response = api_client.post("/api/prompt", json=payload)
    assert response.status_code == 429
    assert response.json() == {"message": "Too many requests. Please slow down."}
    assert int(response.headers["Retry-After"]) >= 1


def test_suggestions_require_two_characters(api_client):
    assert api_client.post("/api/suggestions", json={"input": "a"}).json() == {"suggestions": []}
    assert api_client.post("/api/suggestions").json() == {"suggestions": []}


@pytest.mark.parametrize("value", [42, None, ["koi"], {"text": "koi"}])
def test_suggestions_ignore_non_string_input(api_client, value):
    response = api_client.post("/api/suggestions", json={"input": value})
    assert response.status_code == 200
    assert response.json() == {"suggestions": []}


def test_endpoints_use_local_fallbacks_without_generative_service(api_client):
    suggestions = api_client.post("/api/suggestions", json={"input": "koi"}).json()
    assert suggestions["suggestions"][0] == "koi in cinematic style"
    assert suggestions["note"] == local_fallbacks.SUGGESTIONS_NOTE

    analysis = api_client.post("/api/analyze", json={"prompt": "a cinematic city at night"}).json()
    assert 20 <= analysis["score"] <= 95
    assert len(analysis["feedback"]) == 3
    assert analysis["note"] == local_fallbacks.ANALYSIS_NOTE

    refined = api_client.post("/api/refine", json={"prompt": "a quiet harbor"}).json()
    assert refined["refinedPrompt"].startswith("a quiet harbor")
    assert refined["note"] == local_fallbacks.REFINE_NOTE

    optimized = api_client.post("/api/optimize", json={"idea": "a glacier", "model": "flow"}).json()
    assert optimized["qualityScore"] == 75
    assert optimized["note"] == local_fallbacks.OPTIMIZE_NOTE

    variations = api_client.post(
        "/api/story-variations", json={"story": "A kite escapes.", "model": "flow"}
    ).json()
    assert len(variations["variations"]) == 3
    assert variations["note"] == local_fallbacks.VARIATIONS_NOTE

    elements = api_client.post(
        "/api/cinematic-elements", json={"storyContext": "A kite escapes.", "model": "veo3"}
    ).json()
    assert "(no subtitles)" in elements["audioCues"]
    assert elements["note"] == local_fallbacks.CINEMATIC_NOTE


def test_magic_story_falls_back_to_story_library(api_client):
    response = api_client.post("/api/magic-story", json={"word": "cat", "model": "veo3"})
    assert response.status_code == 200
    body = response.json()
    assert body["story"]["fullStory"].startswith("A curious tabby cat")
    assert body["story"]["fullStory"] in body["prompt"]["assembledPrompt"]
    assert body["note"] == local_fallbacks.MAGIC_STORY_NOTE


def test_magic_story_requires_a_word(api_client):
    assert api_client.post("/api/magic-story", json={"word": "", "model": "flow"}).status_code == 400


def test_generative_failure_answers_with_fallback(api_client, use_adapter):
    use_adapter(RuntimeError("quota exceeded"))
    body = api_client.post("/api/analyze", json={"prompt": "a foggy pier"}).json()
    assert body["note"] == local_fallbacks.ANALYSIS_NOTE


def test_successful_generation_has_no_note(api_client, use_adapter):
    adapter = use_adapter(json.dumps({"score": 82, "feedback": ["Add lighting"]}))
    response = api_client.post("/api/analyze", json={"prompt": "a foggy pier"})
    assert response.json() == {"score": 82, "feedback": ["Add lighting"]}
    assert adapter.client.models.calls[0]["contents"] == "a foggy pier"


def test_refine_defaults_to_flow_model(api_client, use_adapter):
    adapter = use_adapter("A foggy pier at dawn, slow dolly in.\nsecond")
    body = api_client.post("/api/refine", json={"prompt": "a foggy pier"}).json()
    assert body == {"refinedPrompt": "A foggy pier at dawn, slow dolly in."}
    assert "FLOW" in adapter.client.models.calls[0]["config"].system_instruction


def test_magic_story_uses_generated_story(api_client, use_adapter):
    story = {
        "fullStory": "A lantern drifts up into a starry sky.",
        "visualStyle": "dreamlike",
        "cameraMovement": "slow tilt up",
        "background": "a quiet lake at night",
        "lightingMood": "warm lantern glow",
        "audioCues": "crickets and soft chimes",
        "colorPalette": "deep indigo and amber",
        "characterDetails": "a paper lantern",
        "actionSequence": "0-8s the lantern rises",
        "storyMood": "hopeful",
    }
    use_adapter(json.dumps(story))
    body = api_client.post("/api/magic-story", json={"word": "lantern", "model": "flow"}).json()
    assert "note" not in body
    assert body["story"] == story
    assert "A lantern drifts up into a starry sky." in body["prompt"]["assembledPrompt"]


def test_root_and_health(api_client):
    assert "Prompt Studio Service" in api_client.get("/").json()["message"]
    assert api_client.get("/health").json()["status"] in {"ok", "degraded"}


def test_slow_generative_service_answers_with_fallback(api_client, monkeypatch):
    monkeypatch.setattr(settings, "ROUTE_TIMEOUT_SECONDS", 0.05)
    main.app.dependency_overrides[main.get_generative_adapter] = lambda: SlowAdapter()

    suggestions = api_client.post("/api/suggestions", json={"input": "koi"}).json()
    assert suggestions["note"] == local_fallbacks.SUGGESTIONS_NOTE
    assert "too late" not in suggestions["suggestions"]

    analysis = api_client.post("/api/analyze", json={"prompt": "a foggy pier"})
    assert analysis.status_code == 200
    assert analysis.json()["note"] == local_fallbacks.ANALYSIS_NOTE


def test_presets_render_into_prompts(api_client):
    presets = api_client.get("/api/presets").json()
    assert [preset["id"] for preset in presets] == ["cinematic-veo3", "flow-documentary", "runway-abstract"]

    veo3 = presets[0]["request"]
    assert veo3["model"] == "veo3"
    assert veo3["visualStyle"] == "cinematic, moody, 8k"

    response = api_client.post("/api/prompt", json=veo3)
    assert response.status_code == 200
    assert "Visual Style: cinematic, moody, 8k, 8k" in response.json()["assembledPrompt"]
