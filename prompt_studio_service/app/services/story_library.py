# prompt_studio_service/app/services/story_library.py
"""
Offline stories for magic mode. Used when neither the intermediary endpoint nor
the generative service can expand a word.
"""
from typing import Dict, Union

from ..models import StoryExpansion, VideoModel

# Authored stories. "audio_cues" is keyed by audio capability: Veo 3 generates
# dialogue and sound natively, the other targets get a post-production brief.
_AUTHORED_STORIES: Dict[str, Dict[str, object]] = {
    "cat": {
        "full_story": "A curious tabby cat stalks a drifting dust mote across a sunlit windowsill, pounces, misses, and then turns to the camera with a look of perfect dignity.",
        "visual_style": "warm indie film, shallow depth of field",
        "camera_movement": "low-angle tracking shot at cat eye level, ending in a gentle push-in on the face",
        "background": "a cozy apartment windowsill with potted herbs and soft curtains",
        "lighting_mood": "golden afternoon sunlight with floating dust particles, playful and warm",
        "audio_cues": {
            "native": "Soft purring, a light thump as the cat lands, distant street ambience, a gentle playful piano motif (no subtitles)",
            "generic": "light playful piano score with soft household ambience",
        },
        "color_palette": "honey golds, cream whites and soft sage greens",
        "character_details": "a sleek orange tabby with green eyes and a white-tipped tail",
        "action_sequence": "0-3s stalking the dust mote, 3-5s the pounce, 5-8s the dignified recovery and glance to camera",
        "story_mood": "whimsical, warm and gently comedic",
    },
    "dog": {
        "full_story": "A scruffy terrier waits by the front door with a leash in its mouth; the door opens and it bursts into a joyful sprint across a dewy park lawn.",
        "visual_style": "bright lifestyle commercial, crisp and joyful",
        "camera_movement": "static shot on the door, then a fast handheld follow as the dog runs",
        "background": "a suburban hallway opening onto a wide green park at morning",
        "lighting_mood": "fresh morning backlight, optimistic and energetic",
        "audio_cues": {
            "native": "Excited panting, a door latch clicking, paws on wet grass, an upbeat acoustic guitar strum (no subtitles)",
            "generic": "upbeat acoustic guitar track with light outdoor ambience",
        },
        "color_palette": "fresh greens, sky blues and warm tan accents",
        "character_details": "a small wiry-haired terrier with a red collar and one floppy ear",
        "action_sequence": "0-2s waiting at the door, 2-3s door opens, 3-8s sprint across the lawn",
        "story_mood": "pure joy and anticipation released",
    },
    "ocean": {
        "full_story": "A lone surfer paddles out at dawn as a massive wave rises behind them, the sun breaking through its translucent crest.",
        "visual_style": "epic nature documentary, ultra-detailed",
        "camera_movement": "slow aerial drone push toward the surfer, rising to reveal the wave",
        "background": "open ocean with distant cliffs and a clearing sky",
        "lighting_mood": "dawn light filtering through water, awe-inspiring and serene",
        "audio_cues": {
            "native": "Roaring surf, wind over water, a distant gull, a swelling orchestral chord (no subtitles)",
            "generic": "swelling orchestral score layered over ocean ambience",
        },
        "color_palette": "deep teals, turquoise highlights and peach sunrise tones",
        "character_details": "a surfer in a black wetsuit on a white longboard",
        "action_sequence": "0-3s paddling out, 3-6s the wave rises, 6-8s sunlight pierces the crest",
        "story_mood": "awe, solitude and quiet courage",
    },
    "city": {
        "full_story": "A lone figure in a long coat walks through a neon-lit city at night as rain begins to fall and the signs flicker to life around them.",
        "visual_style": "neo-noir, moody, 8k",
        "camera_movement": "slow dolly in, then a tracking shot alongside the walker",
        "background": "rain-slicked streets and towering skyscrapers",
        "lighting_mood": "low-key neon glow, atmospheric and mysterious",
        "audio_cues": {
            "native": "Footsteps on wet pavement, rain patter, distant traffic hum, a low synth pad (no subtitles)",
            "generic": "subtle synth music with distant city hum",
        },
        "color_palette": "dark blues, purples and vibrant neon accents",
        "character_details": "a tall figure in a charcoal coat with the collar turned up",
        "action_sequence": "0-3s walking toward camera, 3-5s rain starts, 5-8s neon signs flicker on",
        "story_mood": "lonely, cinematic and mysterious",
    },
    "forest": {
        "full_story": "Morning mist drifts between ancient trees as a deer steps into a shaft of light, pauses, and looks straight into the lens.",
        "visual_style": "naturalistic, painterly realism",
        "camera_movement": "slow crane down through the canopy, settling at eye level",
        "background": "an old-growth forest with moss-covered trunks and ferns",
        "lighting_mood": "volumetric god rays through mist, calm and sacred",
        "audio_cues": {
            "native": "Birdsong, a twig snapping, soft wind in leaves, a gentle string drone (no subtitles)",
            "generic": "ambient strings with forest birdsong",
        },
        "color_palette": "emerald greens, misty greys and soft gold light",
        "character_details": "a young red deer with velvet antlers",
        "action_sequence": "0-3s descending through the canopy, 3-6s the deer steps into light, 6-8s eye contact",
        "story_mood": "serene, reverent and quietly magical",
    },
    "rain": {
        "full_story": "A child in a yellow raincoat stomps into a puddle on an empty street, sending up a crown of droplets frozen in slow motion.",
        "visual_style": "high-speed cinematography, glossy and vivid",
        "camera_movement": "ground-level static shot switching to 1000fps slow motion on impact",
        "background": "a quiet cobblestone street lined with dark shopfronts",
        "lighting_mood": "overcast diffuse light with bright specular highlights, playful",
        "audio_cues": {
            "native": "Heavy rain, a splash, a child's delighted laugh, a light xylophone melody (no subtitles)",
            "generic": "playful xylophone melody over steady rainfall",
        },
        "color_palette": "slate greys with a saturated yellow accent",
        "character_details": "a small child in a bright yellow raincoat and red boots",
        "action_sequence": "0-2s approach, 2-3s the jump, 3-8s slow-motion splash",
        "story_mood": "carefree delight",
    },
    "space": {
        "full_story": "An astronaut floating outside a space station reaches out as Earth's sunrise sweeps across the horizon and reflects in the visor.",
        "visual_style": "hyperreal science fiction, IMAX clarity",
        "camera_movement": "slow orbit around the astronaut ending on the visor reflection",
        "background": "low Earth orbit with the curve of the planet and a station module",
        "lighting_mood": "harsh unfiltered sunlight against deep black, majestic",
        "audio_cues": {
            "native": "Steady breathing inside the helmet, a soft radio crackle, a rising ambient choir (no subtitles)",
            "generic": "ethereal ambient choir with soft electronic textures",
        },
        "color_palette": "deep blacks, ocean blues and blazing sunrise orange",
        "character_details": "an astronaut in a white EVA suit with a gold-tinted visor",
        "action_sequence": "0-3s orbiting reveal, 3-6s reaching toward the horizon, 6-8s sunrise in the visor",
        "story_mood": "wonder and the fragility of home",
    },
}


def _has_native_audio(model: Union[VideoModel, str]) -> bool:
    model_value = model.value if isinstance(model, VideoModel) else str(model)
    return model_value == VideoModel.VEO3.value


def _synthesize(word: str, native_audio: bool) -> StoryExpansion:
    if native_audio:
        audio_cues = f"Ambient sounds that bring {word} to life, a soft musical score and natural room tone (no subtitles)"
    else:
        audio_cues = f"Atmospheric ambient soundtrack inspired by {word}, added in post-production"
    return StoryExpansion(
        full_story=f"A cinematic moment featuring {word}, captured in a single striking 8-second shot that reveals its beauty and character.",
        visual_style="cinematic realism",
        camera_movement=f"slow dolly in toward {word}, ending in a gentle push-in",
        background=f"an evocative environment that complements {word}",
        lighting_mood="soft dramatic lighting with a warm key light, contemplative",
        audio_cues=audio_cues,
        color_palette="rich, balanced tones with warm highlights",
        character_details=f"{word} as the clear focal point of the frame",
        action_sequence=f"0-3s establishing {word}, 3-6s a subtle movement or change, 6-8s a lingering close-up",
        story_mood="contemplative and visually engaging",
    )


def expand(word: str, model: Union[VideoModel, str]) -> StoryExpansion:
    """Expands a word into a story. Total for any non-empty string."""
    native_audio = _has_native_audio(model)
    authored = _AUTHORED_STORIES.get(word.strip().lower())
    if authored is None:
        return _synthesize(word.strip() or word, native_audio)

    fields = dict(authored)
    audio = fields.pop("audio_cues")
    fields["audio_cues"] = audio["native"] if native_audio else audio["generic"]
    return StoryExpansion(**fields)