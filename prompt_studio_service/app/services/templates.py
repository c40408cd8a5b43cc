# prompt_studio_service/app/services/templates.py
"""
Per-model prompt templates and the renderer that fills them.

Each template is written as plain text with `{placeholder}` tokens and parsed once,
at import time, into an ordered tuple of literal segments and placeholder slots.
Rendering joins the segments with the resolved values, so a value is never
re-scanned for placeholders and every slot is always filled.

To add a new section to a template (e.g. "Emotional Tone: {emotional_tone}"),
add the fragment to models.FRAGMENT_NAMES and fragment_resolver.DEFAULT_FRAGMENTS
first; parsing rejects placeholders it does not know about.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..models import (
    FRAGMENT_NAMES,
    GeneratedPrompt,
    MagicStoryResult,
    PromptPreset,
    PromptRequest,
    StoryExpansion,
    StyleFragments,
    VideoModel,
)
from .fragment_resolver import FragmentOverrides, negative_prompts_for, resolve_fragments

logger = logging.getLogger(__name__)

PLACEHOLDERS = ("idea",) + FRAGMENT_NAMES
_PLACEHOLDER_PATTERN = re.compile(r"\{([a-z_]+)\}")


@dataclass(frozen=True)
class Slot:
    name: str


Segment = Union[str, Slot]


@dataclass(frozen=True)
class PromptTemplate:
    model: VideoModel
    text: str
    segments: Tuple[Segment, ...]

    @classmethod
    def parse(cls, model: VideoModel, text: str) -> "PromptTemplate":
        segments = []
        position = 0
        for match in _PLACEHOLDER_PATTERN.finditer(text):
            name = match.group(1)
            if name not in PLACEHOLDERS:
                raise ValueError(
                    f"Unknown placeholder '{{{name}}}' in {model.value} template."
                )
            if match.start() > position:
                segments.append(text[position : match.start()])
            segments.append(Slot(name))
            position = match.end()
        if position < len(text):
            segments.append(text[position:])
        return cls(model=model, text=text, segments=tuple(segments))

    def fill(self, values: Mapping[str, str]) -> str:
        return "".join(
            values[segment.name] if isinstance(segment, Slot) else segment
            for segment in self.segments
        )


VEO3_TEMPLATE = """
Scene: A high-quality, cinematic shot of {idea}.
Visual Style: {visual_style}, 8k, sharp focus, high contrast.
Camera Movement: {camera_movement}.
Main Subject: A detailed view of {idea}.
Background: {background}.
Lighting and Mood: {lighting_mood}.
Audio Cues: {audio_cues}.
Color Palette: {color_palette}.
Negative Prompts: {negative_prompts}.
"""

FLOW_TEMPLATE = """
Act as a professional cinematographer.
Create a video about {idea}.
The video should have a {visual_style} feel.
Use a {camera_movement} to capture the action.
The main subject is {idea}.
The background should be {background}.
The lighting should be {lighting_mood}.
The audio should consist of {audio_cues}.
The color palette should be {color_palette}.
Avoid the following: {negative_prompts}.
"""

RUNWAY_TEMPLATE = """
{idea}. Style: {visual_style}. Camera: {camera_movement}.
Setting: {background}. Lighting: {lighting_mood}. Colors: {color_palette}.
Sound design (post-production): {audio_cues}.
Exclude: {negative_prompts}.
"""

PIKA_TEMPLATE = """
A {visual_style} clip of {idea}.
Motion: {camera_movement}, with clear and engaging movement of {idea}.
Scene: {background}, lit with {lighting_mood}.
Palette: {color_palette}. Soundtrack idea: {audio_cues}.
Negative prompt: {negative_prompts}.
"""

TEMPLATES: Dict[VideoModel, PromptTemplate] = {
    VideoModel.VEO3: PromptTemplate.parse(VideoModel.VEO3, VEO3_TEMPLATE),
    VideoModel.FLOW: PromptTemplate.parse(VideoModel.FLOW, FLOW_TEMPLATE),
    VideoModel.RUNWAY: PromptTemplate.parse(VideoModel.RUNWAY, RUNWAY_TEMPLATE),
    VideoModel.PIKA: PromptTemplate.parse(VideoModel.PIKA, PIKA_TEMPLATE),
}

# Unrecognized models render with this template instead of failing.
DEFAULT_TEMPLATE_MODEL = VideoModel.FLOW

PRESETS: List[PromptPreset] = [
    PromptPreset(
        id="cinematic-veo3",
        name="Cinematic Veo 3 Intro",
        description="A dramatic, high-quality intro for Veo 3.",
        request=PromptRequest(
            idea="a lone figure walking through a neon-lit city at night",
            model=VideoModel.VEO3,
            visual_style="cinematic, moody, 8k",
            camera_movement="slow dolly in, then tracking shot",
            background="rain-slicked streets, towering skyscrapers",
            lighting_mood="low-key, neon glow, atmospheric",
            audio_cues="subtle synth music, distant city hum, footsteps",
            color_palette="dark blues, purples, and vibrant neon accents",
            negative_prompts="blurry, cartoon, low resolution, daytime",
        ),
    ),
    PromptPreset(
        id="flow-documentary",
        name="Flow Documentary Style",
        description="A clear, informative prompt for Flow in a documentary style.",
        request=PromptRequest(
            idea="a close-up of a bee pollinating a flower",
            model=VideoModel.FLOW,
            visual_style="realistic, natural, macro",
            camera_movement="static shot, then slow pan",
            background="lush garden, blurred foliage",
            lighting_mood="natural sunlight, soft, bright",
            audio_cues="gentle buzzing, ambient nature sounds",
            color_palette="vibrant greens, yellows, and browns",
            negative_prompts="blurry, artificial, cartoon, dark",
        ),
    ),
    PromptPreset(
        id="runway-abstract",
        name="Runway Abstract Art",
        description="An abstract and surreal prompt for RunwayML.",
        request=PromptRequest(
            idea="liquid metal flowing over geometric shapes",
            model=VideoModel.RUNWAY,
            visual_style="abstract, surreal, fluid dynamics",
            camera_movement="orbiting, slow zoom out",
            background="dark void, subtle light sources",
            lighting_mood="iridescent, glowing, ethereal",
            audio_cues="ambient, evolving soundscapes",
            color_palette="shifting metallics, deep purples, electric blues",
            negative_prompts="realistic, mundane, static, sharp edges",
        ),
    ),
]


def get_template(model: Union[VideoModel, str]) -> PromptTemplate:
    try:
        return TEMPLATES[VideoModel(model)]
    except ValueError:
        logger.warning(
            f"Unknown target model '{model}'. Falling back to the {DEFAULT_TEMPLATE_MODEL.value} template."
        )
        return TEMPLATES[DEFAULT_TEMPLATE_MODEL]


def render_prompt(
    idea: str,
    model: Union[VideoModel, str],
    fragments: Optional[FragmentOverrides] = None,
) -> GeneratedPrompt:
    """
    Fills the template for `model` with the idea and the resolved fragments.
    Deterministic and free of I/O; values are inserted verbatim.
    """
    template = get_template(model)
    resolved: StyleFragments = resolve_fragments(fragments)
    values = resolved.model_dump()
    values["idea"] = idea
    return GeneratedPrompt(
        raw_template=template.text, assembled_prompt=template.fill(values)
    )


def render_story_prompt(
    story: StoryExpansion, model: Union[VideoModel, str]
) -> MagicStoryResult:
    """Renders a magic-mode prompt with the story as the idea and its own fragments."""
    fragments = StyleFragments(
        visual_style=story.visual_style,
        camera_movement=story.camera_movement,
        background=story.background,
        lighting_mood=story.lighting_mood,
        audio_cues=story.audio_cues,
        color_palette=story.color_palette,
        negative_prompts=negative_prompts_for(model),
    )
    return MagicStoryResult(
        story=story, prompt=render_prompt(story.full_story, model, fragments)
    )
