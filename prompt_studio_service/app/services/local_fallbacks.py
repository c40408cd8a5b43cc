# prompt_studio_service/app/services/local_fallbacks.py
"""Deterministic, locally computed answers served with a `note` when the generative service fails."""
import re
from typing import List, Union

from ..models import CinematicElements, OptimizationResult, PromptAnalysis, VideoModel
from .fragment_resolver import DEFAULT_FRAGMENTS
from . import story_library

SUGGESTIONS_NOTE = "AI suggestions unavailable, using fallback"
ANALYSIS_NOTE = "AI analysis unavailable, using basic evaluation"
REFINE_NOTE = "AI refinement unavailable, using basic refinement"
OPTIMIZE_NOTE = "AI optimization temporarily unavailable"
MAGIC_STORY_NOTE = "AI story generation unavailable, using offline story library"
VARIATIONS_NOTE = "AI story variations unavailable, using basic variations"
CINEMATIC_NOTE = "AI cinematic elements unavailable, using default elements"

_TECHNICAL_TERMS = re.compile(
    r"\b(cinematic|4k|8k|lighting|camera|angle|color|mood)\b", re.IGNORECASE
)


def fallback_suggestions(partial_input: str) -> List[str]:
    candidates = [
        f"{partial_input} in cinematic style",
        f"{partial_input} with dramatic lighting",
        f"{partial_input} in slow motion",
        f"{partial_input} from unique angle",
        f"{partial_input} with vibrant colors",
    ]
    return [s for s in candidates if len(s) < 50]


def fallback_analysis(prompt: str) -> PromptAnalysis:
    word_count = len(prompt.split(" "))
    has_specifics = bool(_TECHNICAL_TERMS.search(prompt))
    raw_score = word_count * 3 + (20 if has_specifics else 0) + (10 if len(prompt) > 50 else 0)
    return PromptAnalysis(
        score=min(95, max(20, raw_score)),
        feedback=[
            "Consider adding more descriptive details" if word_count < 10 else "Good detail level",
            "Contains relevant technical terms" if has_specifics else "Could benefit from technical specifications",
            "Good comprehensive description" if len(prompt) > 100 else "Consider expanding the description",
        ],
    )


def fallback_refinement(prompt: str) -> str:
    return f"{prompt}\n\n(Refined for more detail and cinematic flair.)"


def fallback_optimization(idea: str) -> OptimizationResult:
    return OptimizationResult(
        optimized_prompt=f"Create a high-quality video of {idea} with professional cinematography and excellent visual composition.",
        suggestions=[],
        quality_score=75,
        improvements=["AI optimization unavailable"],
    )


def fallback_story_variations(story: str) -> List[str]:
    base = story.strip().rstrip(".")
    return [
        f"{base}, retold at golden hour from a low, intimate angle.",
        f"{base}, reimagined as a moody night scene in a single continuous take.",
        f"{base}, seen through a playful slow-motion lens with vivid colors.",
    ]


def fallback_cinematic_elements(model: Union[VideoModel, str]) -> CinematicElements:
    # Reuse the story library's generic synthesis for model-aware audio cues.
    audio_cues = story_library.expand("the scene", model).audio_cues
    return CinematicElements(
        visual_style=DEFAULT_FRAGMENTS["visual_style"],
        camera_movement=DEFAULT_FRAGMENTS["camera_movement"],
        background=DEFAULT_FRAGMENTS["background"],
        lighting_mood=DEFAULT_FRAGMENTS["lighting_mood"],
        audio_cues=audio_cues,
        color_palette=DEFAULT_FRAGMENTS["color_palette"],
    )
