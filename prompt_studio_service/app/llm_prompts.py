# prompt_studio_service/app/llm_prompts.py
from typing import Optional

_MODEL_GUIDANCE = {
    "veo3": (
        "Focus on 8-second narratives with native audio integration. Include dialogue formatting: "
        "\"Character says: 'dialogue content'\". Emphasize realistic physics, character consistency, "
        "and cinematic audio (dialogue, ambient sounds, music). Consider camera positioning explicitly "
        "rather than generic viewpoints."
    ),
    "flow": (
        "Emphasize cinematic filmmaking techniques. Use an ingredients-based approach with modular elements. "
        "Focus on professional cinematography, advanced camera movements (dolly zoom, rack focus, tracking shots), "
        "and scene building. Think like a professional filmmaker."
    ),
    "runway": (
        "Create visually striking content optimized for RunwayML's capabilities. "
        "Focus on strong visual concepts and clear motion."
    ),
    "pika": (
        "Design content optimized for Pika Labs with emphasis on creative visual effects and engaging motion."
    ),
}

SUGGESTIONS_SYSTEM_PROMPT = """
You are a creative AI that suggests video ideas. Given a partial input, suggest 5 creative, specific video concepts
that complete or expand on the idea. Keep suggestions concise (under 15 words each).
Return only the suggestions, one per line, without numbering.
"""

ANALYSIS_SYSTEM_PROMPT = """
Analyze this video generation prompt and provide:
1. A quality score (0-100)
2. 3-5 specific feedback points

Focus on: clarity, specificity, visual appeal, technical accuracy, creativity.

Respond with JSON: {"score": 85, "feedback": ["point 1", "point 2"]}
"""

STORY_VARIATIONS_SYSTEM_PROMPT = """
You are a creative story developer. Take the given story concept and create 3 alternative interpretations of the same concept.
Each should be:
- Equally engaging but different in approach
- Suitable for 8-second video generation
- Optimized for {model}
- Creative and unexpected

Return only the 3 story variations, one per line.
"""

REFINE_SYSTEM_PROMPT = """
You are an expert prompt refiner for {model} video generation. Take the given prompt and create 3 refined variations that:
1. Improve clarity and specificity
2. Enhance visual appeal
3. Add technical excellence

Return only the 3 refined prompts, one per line.
"""

OPTIMIZE_SYSTEM_PROMPT = """
You are an expert AI video prompt engineer specializing in {model} video generation.

Your task is to optimize video generation prompts for maximum quality and creativity. You understand:
- Technical requirements for {model}
- Visual storytelling principles
- Cinematic techniques
- Lighting and composition
- Camera movements and angles

Respond with a JSON object containing:
{{
  "optimizedPrompt": "The best possible prompt",
  "suggestions": [
    {{
      "prompt": "Alternative suggestion",
      "score": 95,
      "reasoning": "Why this works well",
      "improvements": ["specific improvement 1", "improvement 2"]
    }}
  ],
  "qualityScore": 95,
  "improvements": ["Key improvement areas"]
}}
"""

STORY_SYSTEM_PROMPT = """
You are an expert AI video story creator specializing in {model} video generation. Your expertise includes:

- Google Veo 3 & Flow advanced prompting techniques
- Professional cinematography and filmmaking
- 8-second narrative storytelling
- Character consistency and visual continuity
- Advanced camera techniques (dolly zoom, rack focus, tracking shots, etc.)
- Audio-visual integration for {audio_mode}

{guidance}

From a single word, create a complete 8-second cinematic story concept. Think of professional film production -
every element should work together to create a compelling narrative moment.

Respond with JSON containing:
{{
  "fullStory": "Complete 8-second story description",
  "visualStyle": "Specific visual aesthetic (e.g., 'cinematic realism', 'film noir', 'warm indie film')",
  "cameraMovement": "Professional camera technique (e.g., 'slow dolly zoom revealing character's realization')",
  "background": "Detailed environment description",
  "lightingMood": "Specific lighting setup and emotional tone",
  "audioCues": "{audio_field}",
  "colorPalette": "Specific color scheme that supports the story",
  "characterDetails": "Detailed character description for consistency",
  "actionSequence": "Specific 8-second action breakdown",
  "storyMood": "Overall emotional tone and narrative purpose"
}}
"""

CINEMATIC_SYSTEM_PROMPT = """
You are a professional cinematographer and video prompt engineer specializing in {model}.

Based on a story context, generate optimal cinematic elements:
{guidance}

Respond with JSON:
{{
  "visualStyle": "Specific aesthetic approach",
  "cameraMovement": "Professional camera technique",
  "background": "Detailed environment",
  "lightingMood": "Lighting setup and emotional tone",
  "audioCues": "Audio design and music",
  "colorPalette": "Color scheme supporting the narrative"
}}
"""

_CINEMATIC_GUIDANCE = {
    "veo3": """
- Use native audio integration techniques
- Include specific dialogue formatting: "Character speaking to camera saying: 'dialogue'"
- Specify camera positioning explicitly
- Add "(no subtitles)" to prevent text overlay
- Include ambient sounds and music descriptions
""",
    "flow": """
- Think like a professional filmmaker
- Use advanced cinematic language (match cut, jump cut, establishing shot)
- Emphasize modular ingredient-based composition
- Include sophisticated camera movements (vertigo effect, rack focus)
""",
}


def construct_suggestions_prompt(partial_input: str) -> str:
    return f'Partial idea: "{partial_input}"'


def construct_optimize_prompt(
    idea: str, model: str, current_prompt: Optional[str] = None
) -> str:
    current = f'Current prompt: "{current_prompt}"\n' if current_prompt else ""
    return (
        f'Video idea: "{idea}"\n'
        f"Target model: {model}\n"
        f"{current}\n"
        f"Please optimize this for {model} and provide 3 alternative suggestions with quality scores."
    )


def construct_story_prompt(word: str, model: str) -> str:
    return f"""
Create a complete 8-second cinematic story from this single word: "{word}"

The story should be:
- Emotionally engaging and visually compelling
- Feasible to shoot in 8 seconds
- Rich in cinematic detail
- Optimized for {model.upper()} generation
- Professional film quality

Be creative and imaginative - take the word in an unexpected but meaningful direction that creates a memorable moment.
"""


def construct_cinematic_prompt(story_context: str) -> str:
    return f"Story context: {story_context}"


def get_refine_system_prompt(model: str) -> str:
    return REFINE_SYSTEM_PROMPT.format(model=model.upper())


def get_story_variations_system_prompt(model: str) -> str:
    return STORY_VARIATIONS_SYSTEM_PROMPT.format(model=model.upper())


def get_optimize_system_prompt(model: str) -> str:
    return OPTIMIZE_SYSTEM_PROMPT.format(model=model.upper())


def get_story_system_prompt(model: str) -> str:
    native_audio = model == "veo3"
    return STORY_SYSTEM_PROMPT.format(
        model=model.upper(),
        audio_mode="native audio generation" if native_audio else "post-production audio",
        guidance=_MODEL_GUIDANCE.get(model, _MODEL_GUIDANCE["flow"]),
        audio_field=(
            "Dialogue, ambient sounds, and music with specific formatting"
            if native_audio
            else "Sound design and music description"
        ),
    )


def get_cinematic_system_prompt(model: str) -> str:
    guidance = _CINEMATIC_GUIDANCE.get(
        model,
        f"""
- Focus on strong visual concepts for {model}
- Optimize for platform-specific capabilities
""",
    )
    return CINEMATIC_SYSTEM_PROMPT.format(model=model.upper(), guidance=guidance)
