"""Prompt builders for report generation and feedback analysis.

All builders are pure: they take the validated request and resolved
profiles and return strings.
"""

from partner_reports.models.schemas import GenerateReportRequest

from .profiles import PlatformProfile, ToneProfile

COMPANY_NAME = "Ocean Air Travels"

# Words the report must never use
AVOIDED_WORDS = ("complaint", "fault", "problem", "issue", "incident")

SYSTEM_PROMPT_TEMPLATE = """You are a senior operations executive at {company}, a premium travel company. You write professional partner reports that transform informal guide feedback into polished, human-written communications.

CRITICAL WRITING RULES:
1. Write as if a senior operations executive wrote it personally - not AI
2. Never use words like: {avoided_words}
3. Use phrases like: "kindly note", "as a proactive update", "to keep all partners aligned", "for your reference"
4. Never sound angry, defensive, sarcastic, or robotic
5. No emojis, no markdown formatting, no bullet points in the output
6. No mention of "AI", "model", "generated", or any technical terms
7. Vary sentence length for natural flow
8. Use complete paragraphs with smooth transitions
9. Be empathetic to the customer while protecting the company professionally
10. Frame everything as proactive communication, not reactive damage control

TONE INSTRUCTION:
{tone_instruction}

PLATFORM FORMATTING:
{platform_guidelines}

STRUCTURE YOUR RESPONSE AS:
1. Professional greeting appropriate for the platform
2. Brief context of the booking (if details provided)
3. Factual explanation of the situation from the guide's perspective
4. Clarification of what was included vs. what may have been expected
5. Description of how our guide handled the situation professionally
6. Proactive communication intent and commitment to quality
7. Courteous closing with signature

Remember: This report will be sent to travel platform partners. It should reflect well on {company} while being honest and transparent."""

ANALYSIS_PROMPT_TEMPLATE = """Analyze this feedback and identify key elements. Return a JSON object with these fields:
- foodIssues: boolean
- customerBehavior: string (brief description or "None identified")
- expectationMismatch: string (brief description or "None identified")
- guideResponse: string (brief description or "Not mentioned")

Feedback: {raw_feedback}

Return ONLY valid JSON, no other text."""

# (label, request attribute) for optional context lines, in output order
OPTIONAL_FIELDS = (
    ("CUSTOMER NAME", "customer_name"),
    ("BOOKING REFERENCE", "booking_reference"),
    ("TOUR NAME", "tour_name"),
    ("MEAL INCLUSION", "meal_type"),
    ("ADDITIONAL GUIDE REMARKS", "guide_remarks"),
)


def build_system_prompt(platform: PlatformProfile, tone: ToneProfile) -> str:
    """Build the system prompt for the report task."""
    return SYSTEM_PROMPT_TEMPLATE.format(
        company=COMPANY_NAME,
        avoided_words=", ".join(AVOIDED_WORDS),
        tone_instruction=tone.style_instruction,
        platform_guidelines=platform.formatting_guidelines,
    )


def build_context_lines(request: GenerateReportRequest) -> list[str]:
    """Labeled lines for the optional fields that are present."""
    lines = []
    for label, attr in OPTIONAL_FIELDS:
        value = getattr(request, attr)
        if value and value.strip():
            lines.append(f"{label}: {value.strip()}")
    return lines


def build_user_prompt(
    request: GenerateReportRequest,
    platform: PlatformProfile,
    tone: ToneProfile,
) -> str:
    """Build the user prompt for the report task."""
    sections = [
        "Please transform the following guide feedback into a professional partner report.",
        f"RAW FEEDBACK FROM GUIDE:\n{request.raw_feedback.strip()}",
    ]

    context_lines = build_context_lines(request)
    if context_lines:
        sections.append("\n".join(context_lines))

    sections.append(f"PLATFORM: {platform.display_name}\nTONE: {tone.display_name}")
    sections.append(
        "Generate the professional report now. Write it as plain text without "
        "any markdown formatting, headers, or bullet points. The output should "
        "be ready to copy and paste into an email."
    )
    return "\n\n".join(sections)


def build_analysis_prompt(raw_feedback: str) -> str:
    """Build the prompt for the structured analysis task."""
    return ANALYSIS_PROMPT_TEMPLATE.format(raw_feedback=raw_feedback.strip())
