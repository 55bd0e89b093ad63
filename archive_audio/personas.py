"""Persona table and persona selection for the two speakers of a run."""

import json
import logging
import os
import random
from dataclasses import replace

from archive_audio.constants import ENV_PERSONAS_FILE
from archive_audio.models import Persona, Voice

logger = logging.getLogger(__name__)

VOICES = {
    "john": Voice(
        id="john",
        name="John",
        voice_id="n1PvBOwxb8X6m7tahp2h",
        stability=0.5,
        similarity_boost=0.75,
        edge_voice="en-US-GuyNeural",
    ),
    "sadie": Voice(
        id="sadie",
        name="Sadie",
        voice_id="56bWURjYFHyYyVf490Dp",
        stability=0.6,
        similarity_boost=0.75,
        edge_voice="en-US-AriaNeural",
    ),
}

PERSONAS = {
    "reporter": Persona(
        key="reporter",
        name="Sadie Woodward",
        alias="The Story Hunter",
        tone="incisive and compelling",
        humor_style="sharp observations with subtle irony",
        interests=("investigative journalism", "public accountability", "historical context", "power structures"),
        voice=VOICES["sadie"],
        opening_lines=(
            "This story goes deeper than most realize.",
            "The public deserves to know what we've uncovered.",
            "Behind the official narrative lies a web of connections.",
            "When you follow the evidence trail...",
            "Today we're diving into documents that tell a remarkable story.",
        ),
        closing_lines=(
            "The public deserves transparency, and we'll keep digging until we find it.",
            "As we continue to investigate, remember that history is written by those who control the narrative.",
            "The story doesn't end here - we're just beginning to connect the dots.",
            "Stay vigilant, stay informed, and question everything.",
            "This investigation continues, and so does our commitment to the truth.",
        ),
    ),
    "privateEye": Persona(
        key="privateEye",
        name="John Marlowe",
        alias="The Truth Seeker",
        tone="hardboiled and analytical",
        humor_style="dry wit with cynical undertones",
        interests=("crime solving", "investigation techniques", "pattern recognition", "hidden motives"),
        voice=VOICES["john"],
        opening_lines=(
            "Listen up, because this is important.",
            "The facts don't lie, but people do.",
            "What we have here is more than a coincidence.",
            "I've seen a lot in my time, but this case...",
            "Let me lay out what we know so far.",
        ),
        closing_lines=(
            "The truth is out there, but you've got to want to see it.",
            "That's how the pieces fit together. At least, the ones we can see.",
            "Sometimes the answers create more questions.",
            "Remember, in this business, coincidences are rarely that.",
            "The case isn't closed, but we're closer to the truth.",
        ),
    ),
    "host1": Persona(
        key="host1",
        name="John",
        alias="The Analyst",
        tone="thoughtful and engaging",
        humor_style="dry wit with warmth",
        interests=("current events", "analysis", "storytelling"),
        voice=VOICES["john"],
        opening_lines=(
            "Welcome back, everyone.",
            "Let's dive into today's topic.",
            "There's a lot to unpack here.",
        ),
        closing_lines=(
            "Thanks for listening.",
            "Until next time, stay curious.",
            "That's all for today's episode.",
        ),
    ),
    "host2": Persona(
        key="host2",
        name="Sadie",
        alias="The Commentator",
        tone="engaging and informative",
        humor_style="witty observations",
        interests=("deep dives", "research", "discussion"),
        voice=VOICES["sadie"],
        opening_lines=(
            "Great to be here.",
            "This is fascinating material.",
            "I've been looking forward to discussing this.",
        ),
        closing_lines=(
            "What a discussion!",
            "Can't wait for the next one.",
            "Thanks everyone for tuning in.",
        ),
    ),
}


def load_persona_overrides(path: str) -> dict:
    """Load a JSON file of per-persona voice overrides.

    Shape: {"reporter": {"voice_id": "...", "stability": 0.4}, ...}.
    Returns empty dict if the file is missing or malformed.
    """
    if not path or not os.path.exists(path):
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed personas file: %s - using built-in voices", path)
        return {}
    if not isinstance(data, dict):
        logger.warning("Personas file %s is not a JSON object - ignoring", path)
        return {}
    return data


def apply_overrides(personas: dict[str, Persona], overrides: dict) -> dict[str, Persona]:
    """Return a copy of personas with voice settings replaced per override."""
    voice_fields = {"voice_id", "stability", "similarity_boost", "edge_voice"}
    result = dict(personas)
    for key, settings in overrides.items():
        persona = result.get(key)
        if persona is None or not isinstance(settings, dict):
            logger.warning("Ignoring override for unknown persona: %s", key)
            continue
        changes = {k: v for k, v in settings.items() if k in voice_fields}
        if changes:
            result[key] = replace(persona, voice=replace(persona.voice, **changes))
    return result


def get_personas() -> dict[str, Persona]:
    """Built-in personas with any overrides from ARCHIVE_AUDIO_PERSONAS_FILE applied."""
    overrides = load_persona_overrides(os.environ.get(ENV_PERSONAS_FILE, ""))
    if not overrides:
        return PERSONAS
    return apply_overrides(PERSONAS, overrides)


def select_personas(
    keys: list[str] | tuple[str, ...] | None,
    defaults: tuple[str, str],
    personas: dict[str, Persona] | None = None,
) -> tuple[Persona, Persona]:
    """Pick the two speakers for a run.

    Unknown or missing keys fall back to the default at the same position.
    """
    if personas is None:
        personas = get_personas()
    keys = list(keys or [])
    selected = []
    for position, default_key in enumerate(defaults):
        key = keys[position] if position < len(keys) else default_key
        persona = personas.get(key)
        if persona is None:
            logger.warning("Unknown persona '%s', using '%s'", key, default_key)
            persona = personas[default_key]
        selected.append(persona)
    return selected[0], selected[1]


def pick_line(lines: tuple[str, ...], rng: random.Random | None = None) -> str:
    """Choose an opening/closing line template at random."""
    if not lines:
        return ""
    return (rng or random).choice(lines)
