# prompt_studio_service/app/services/generative_adapter.py
import json
import logging
import re
from typing import Any, List, Optional, Type, TypeVar

from google import genai
from google.genai import types
from pydantic import BaseModel, ValidationError

from ..config import settings
from .. import llm_prompts
from ..models import (
    CinematicElements,
    OptimizationResult,
    PromptAnalysis,
    StoryExpansion,
    VideoModel,
)

logger = logging.getLogger(__name__)

ResponseModelT = TypeVar("ResponseModelT", bound=BaseModel)
_LIST_MARKER = re.compile(r"^(\d+[.)]|[-*•])\s*")


class GenerativeServiceError(Exception):
    pass


def _model_value(model: Any) -> str:
    return model.value if isinstance(model, VideoModel) else str(model)


def _clean_json_text(raw_text: str) -> str:
    cleaned = raw_text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _split_lines(text: str, limit: int) -> List[str]:
    lines = []
    for line in text.split("\n"):
        # Models like to number or bullet their lists even when asked not to.
        stripped = _LIST_MARKER.sub("", line.strip()).strip()
        if stripped:
            lines.append(stripped)
    return lines[:limit]


class GenerativeServiceAdapter:
    """
    Thin wrapper over the Gemini API for the AI-assisted prompt operations.
    Every failure mode (transport error, empty text, bad JSON, wrong shape)
    surfaces as GenerativeServiceError; there is no partial success.
    """

    def __init__(self, client: genai.Client):
        self.client = client

    async def _generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: str,
        temperature: float,
        max_output_tokens: int,
        json_output: bool = False,
    ) -> str:
        content_config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json" if json_output else None,
        )
        logger.debug(f"Calling {model_name}. User prompt snippet: {user_prompt[:100]}...")
        try:
            response = await self.client.aio.models.generate_content(
                model=model_name,
                contents=user_prompt,
                config=content_config,
            )
        except Exception as e:
            logger.error(f"Generative service call to {model_name} failed: {e}", exc_info=True)
            raise GenerativeServiceError(f"LLM interaction failed: {str(e)}")

        if hasattr(response, "text") and response.text and response.text.strip():
            return response.text.strip()

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = feedback.block_reason if feedback else "N/A"
        logger.warning(f"{model_name} returned no text. Block reason: {block_reason}")
        raise GenerativeServiceError("LLM returned no text.")

    async def _generate_json(
        self,
        response_model: Type[ResponseModelT],
        system_prompt: str,
        user_prompt: str,
        model_name: str,
        temperature: float,
        max_output_tokens: int,
    ) -> ResponseModelT:
        raw_text = await self._generate_text(
            system_prompt,
            user_prompt,
            model_name,
            temperature,
            max_output_tokens,
            json_output=True,
        )
        cleaned = _clean_json_text(raw_text)
        try:
            return response_model.model_validate(json.loads(cleaned))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse LLM JSON response: {e}. Raw: '{cleaned[:200]}'")
            raise GenerativeServiceError(f"LLM returned invalid JSON. Raw: {raw_text[:200]}...")
        except ValidationError as e:
            logger.error(f"LLM response did not match {response_model.__name__}: {e}")
            raise GenerativeServiceError(f"LLM response structure invalid. Error: {e}")

    async def generate_suggestions(self, partial_input: str) -> List[str]:
        text = await self._generate_text(
            llm_prompts.SUGGESTIONS_SYSTEM_PROMPT,
            llm_prompts.construct_suggestions_prompt(partial_input),
            settings.FAST_GEMINI_MODEL_NAME,
            temperature=0.9,
            max_output_tokens=200,
        )
        return _split_lines(text, 5)

    async def refine_prompt(self, prompt: str, model: Any) -> List[str]:
        text = await self._generate_text(
            llm_prompts.get_refine_system_prompt(_model_value(model)),
            prompt,
            settings.STORY_GEMINI_MODEL_NAME,
            temperature=0.7,
            max_output_tokens=800,
        )
        return _split_lines(text, 3)

    async def analyze_prompt(self, prompt: str) -> PromptAnalysis:
        return await self._generate_json(
            PromptAnalysis,
            llm_prompts.ANALYSIS_SYSTEM_PROMPT,
            prompt,
            settings.FAST_GEMINI_MODEL_NAME,
            temperature=0.3,
            max_output_tokens=300,
        )

    async def optimize_prompt(
        self, idea: str, model: Any, current_prompt: Optional[str] = None
    ) -> OptimizationResult:
        model_name = _model_value(model)
        result = await self._generate_json(
            OptimizationResult,
            llm_prompts.get_optimize_system_prompt(model_name),
            llm_prompts.construct_optimize_prompt(idea, model_name, current_prompt),
            settings.STORY_GEMINI_MODEL_NAME,
            temperature=settings.LLM_TEMPERATURE,
            max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
        )
        logger.info(
            f"Prompt optimized. Quality score: {result.quality_score}, {len(result.suggestions)} suggestions."
        )
        return result

    async def expand_word_to_story(self, word: str, model: Any) -> StoryExpansion:
        model_name = _model_value(model)
        return await self._generate_json(
            StoryExpansion,
            llm_prompts.get_story_system_prompt(model_name),
            llm_prompts.construct_story_prompt(word, model_name),
            settings.STORY_GEMINI_MODEL_NAME,
            temperature=settings.LLM_TEMPERATURE,
            max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
        )

    async def generate_cinematic_elements(
        self, story_context: str, model: Any
    ) -> CinematicElements:
        return await self._generate_json(
            CinematicElements,
            llm_prompts.get_cinematic_system_prompt(_model_value(model)),
            llm_prompts.construct_cinematic_prompt(story_context),
            settings.FAST_GEMINI_MODEL_NAME,
            temperature=0.7,
            max_output_tokens=800,
        )

    async def generate_story_variations(self, story: str, model: Any) -> List[str]:
        text = await self._generate_text(
            llm_prompts.get_story_variations_system_prompt(_model_value(model)),
            story,
            settings.FAST_GEMINI_MODEL_NAME,
            temperature=0.9,
            max_output_tokens=600,
        )
        return _split_lines(text, 3)
