"""Partner platform and tone profiles used to shape generated reports."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlatformProfile:
    """Formatting guidelines for one partner platform."""

    display_name: str
    formatting_guidelines: str


@dataclass(frozen=True)
class ToneProfile:
    """Style instruction for one requested tone."""

    display_name: str
    style_instruction: str


DEFAULT_PLATFORM = "generic"
DEFAULT_TONE = "neutral"

PLATFORM_PROFILES: dict[str, PlatformProfile] = {
    "getyourguide": PlatformProfile(
        display_name="GetYourGuide",
        formatting_guidelines=(
            "- Use formal but warm tone\n"
            '- Start with "Dear GetYourGuide Partner Team"\n'
            "- Include booking reference prominently\n"
            '- End with "Best regards" followed by signature block\n'
            "- Keep paragraphs concise but complete"
        ),
    ),
    "viator": PlatformProfile(
        display_name="Viator",
        formatting_guidelines=(
            "- Use professional yet approachable tone\n"
            '- Start with "Dear Viator Partner Support"\n'
            "- Reference the activity/tour name early\n"
            '- End with "Kind regards" followed by signature block\n'
            "- Include clear next steps if applicable"
        ),
    ),
    "generic": PlatformProfile(
        display_name="Generic Partner",
        formatting_guidelines=(
            "- Use universally professional tone\n"
            '- Start with "Dear Partner Team"\n'
            "- Provide full context as the recipient may not have background\n"
            '- End with "Warm regards" followed by signature block\n'
            "- Be thorough but not verbose"
        ),
    ),
}

TONE_PROFILES: dict[str, ToneProfile] = {
    "neutral": ToneProfile(
        display_name="Neutral",
        style_instruction=(
            "Maintain a balanced, factual, and professional tone. Present "
            "information objectively without being cold or distant. Focus on "
            "clarity and completeness."
        ),
    ),
    "soft": ToneProfile(
        display_name="Soft & Apologetic",
        style_instruction=(
            "Use an empathetic and understanding tone. Acknowledge the customer "
            "experience with genuine care. Express regret where appropriate "
            "without admitting fault. Emphasize our commitment to guest satisfaction."
        ),
    ),
    "firm": ToneProfile(
        display_name="Firm but Polite",
        style_instruction=(
            "Maintain professionalism while being clear and assertive. State "
            "facts confidently. Politely clarify any misunderstandings about "
            "inclusions or expectations. Stand by the quality of service while "
            "remaining respectful."
        ),
    ),
}


def _normalize_key(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def resolve_platform(platform: Optional[str]) -> PlatformProfile:
    """Get the profile for a platform id, falling back to the generic profile."""
    return PLATFORM_PROFILES.get(_normalize_key(platform), PLATFORM_PROFILES[DEFAULT_PLATFORM])


def resolve_tone(tone: Optional[str]) -> ToneProfile:
    """Get the profile for a tone id, falling back to neutral."""
    return TONE_PROFILES.get(_normalize_key(tone), TONE_PROFILES[DEFAULT_TONE])
