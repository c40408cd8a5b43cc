# prompt_studio_service/app/services/fragment_resolver.py
from typing import Any, Mapping, Union

from pydantic.alias_generators import to_camel

from ..models import FRAGMENT_NAMES, StyleFragments, VideoModel

DEFAULT_FRAGMENTS = {
    "visual_style": "cinematic",
    "camera_movement": "slow dolly in",
    "background": "a neutral, out-of-focus background",
    "lighting_mood": "dramatic, with a single key light",
    "audio_cues": "a subtle, ambient soundtrack",
    "color_palette": "a muted, desaturated color palette",
    "negative_prompts": "blurry, low-quality, cartoonish",
}

# Veo 3 generates audio natively, so on-screen text has to be excluded explicitly.
VEO3_NEGATIVE_PROMPTS = "blurry, low-quality, subtitles, text overlay"

FragmentOverrides = Union[StyleFragments, Mapping[str, Any], None]


def _lookup(overrides: Mapping[str, Any], name: str) -> Any:
    if name in overrides:
        return overrides[name]
    return overrides.get(to_camel(name))


def resolve_fragments(overrides: FragmentOverrides = None) -> StyleFragments:
    """
    Returns a complete fragment set. Missing, blank or non-string overrides are
    replaced by the default for that fragment; this never raises.
    """
    if isinstance(overrides, StyleFragments):
        overrides = overrides.model_dump()
    elif not isinstance(overrides, Mapping):
        overrides = {}

    resolved = {}
    for name in FRAGMENT_NAMES:
        value = _lookup(overrides, name)
        if isinstance(value, str) and value.strip():
            resolved[name] = value
        else:
            resolved[name] = DEFAULT_FRAGMENTS[name]
    return StyleFragments(**resolved)


def negative_prompts_for(model: Union[VideoModel, str]) -> str:
    """Negative prompts used when a story drives the render (magic mode)."""
    model_value = model.value if isinstance(model, VideoModel) else str(model)
    if model_value == VideoModel.VEO3.value:
        return VEO3_NEGATIVE_PROMPTS
    return DEFAULT_FRAGMENTS["negative_prompts"]
