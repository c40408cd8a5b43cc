# prompt_studio_service/app/models.py
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire format is camelCase (visualStyle, rawTemplate, ...), attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoModel(str, Enum):
    VEO3 = "veo3"  # Google Veo 3, native audio
    FLOW = "flow"  # Google Flow
    RUNWAY = "runway"  # RunwayML
    PIKA = "pika"  # Pika Labs


FRAGMENT_NAMES = (
    "visual_style",
    "camera_movement",
    "background",
    "lighting_mood",
    "audio_cues",
    "color_palette",
    "negative_prompts",
)


class StyleFragments(CamelModel):
    visual_style: Optional[str] = None
    camera_movement: Optional[str] = None
    background: Optional[str] = None
    lighting_mood: Optional[str] = None
    audio_cues: Optional[str] = None
    color_palette: Optional[str] = None
    negative_prompts: Optional[str] = None

    @field_validator(*FRAGMENT_NAMES, mode="before")
    @classmethod
    def drop_malformed_fragments(cls, value: Any) -> Optional[str]:
        # Non-string fragments fall back to their defaults when resolved.
        return value if isinstance(value, str) else None


class PromptRequest(StyleFragments):
    idea: str = Field(
        ...,
        min_length=1,
        max_length=100,
        examples=["a lone figure walking through a neon-lit city at night"],
    )
    model: VideoModel = Field(..., examples=["veo3"])

    def fragment_overrides(self) -> StyleFragments:
        return StyleFragments(
            **{name: getattr(self, name) for name in FRAGMENT_NAMES}
        )


class GeneratedPrompt(CamelModel):
    model_config = ConfigDict(frozen=True)

    raw_template: str
    assembled_prompt: str


class StoryExpansion(CamelModel):
    full_story: str
    visual_style: str
    camera_movement: str
    background: str
    lighting_mood: str
    audio_cues: str
    color_palette: str
    character_details: str
    action_sequence: str
    story_mood: str


class CinematicElements(CamelModel):
    visual_style: str
    camera_movement: str
    background: str
    lighting_mood: str
    audio_cues: str
    color_palette: str


class PromptSuggestion(CamelModel):
    prompt: str
    score: int = Field(..., ge=0, le=100, examples=[95])
    reasoning: str = ""
    improvements: List[str] = Field(default_factory=list)


class OptimizationResult(CamelModel):
    optimized_prompt: str
    suggestions: List[PromptSuggestion] = Field(default_factory=list)
    quality_score: int = Field(..., ge=0, le=100, examples=[90])
    improvements: List[str] = Field(default_factory=list)


class PromptAnalysis(CamelModel):
    score: int = Field(..., ge=0, le=100, examples=[85])
    feedback: List[str] = Field(default_factory=list)


class MagicStoryResult(CamelModel):
    story: StoryExpansion
    prompt: GeneratedPrompt


class PromptPreset(CamelModel):
    """A ready-made request the studio offers as a starting point."""

    id: str
    name: str
    description: str
    request: PromptRequest


# --- Operation request bodies ---


class SuggestionsRequest(CamelModel):
    input: str = ""

    @field_validator("input", mode="before")
    @classmethod
    def non_string_input_is_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class AnalyzeRequest(CamelModel):
    prompt: str = Field(..., min_length=1)


class RefineRequest(CamelModel):
    prompt: str = Field(..., min_length=1)
    model: Optional[str] = None


class OptimizeRequest(CamelModel):
    idea: str = Field(..., min_length=1)
    model: VideoModel
    current_prompt: Optional[str] = None


class MagicStoryRequest(CamelModel):
    word: str = Field(..., min_length=1, examples=["cat"])
    model: VideoModel


class StoryVariationsRequest(CamelModel):
    story: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)


class CinematicElementsRequest(CamelModel):
    story_context: str = Field(..., min_length=1)
    model: VideoModel


# --- Operation responses. `note` is only set on the degraded (local) path. ---


class SuggestionsResponse(CamelModel):
    suggestions: List[str] = Field(default_factory=list)
    note: Optional[str] = None


class AnalysisResponse(PromptAnalysis):
    note: Optional[str] = None


class RefineResponse(CamelModel):
    refined_prompt: str
    note: Optional[str] = None


class OptimizationResponse(OptimizationResult):
    note: Optional[str] = None


class MagicStoryResponse(MagicStoryResult):
    note: Optional[str] = None


class StoryVariationsResponse(CamelModel):
    variations: List[str] = Field(default_factory=list)
    note: Optional[str] = None


class CinematicElementsResponse(CinematicElements):
    note: Optional[str] = None
