"""
Tone-of-voice translator.

Converts numeric tone axes (0.0 - 1.0) into natural-language instructions
injected into the sequence generation prompt.

Each axis is bucketed into three tiers:
    - low:    value <= 0.3
    - medium: 0.3 < value <= 0.7
    - high:   value > 0.7
"""

from typing import Dict, Optional

LOW = "low"
MEDIUM = "medium"
HIGH = "high"


def get_tier(value: float) -> str:
    """Bucket a tone axis value into low, medium or high."""
    if value <= 0.3:
        return LOW
    if value <= 0.7:
        return MEDIUM
    return HIGH


FORMALITY: Dict[str, str] = {
    LOW: (
        "Use casual, conversational language. Contractions, colloquialisms, and an "
        "informal style are encouraged. Write as if messaging a peer."
    ),
    MEDIUM: (
        "Use a professional yet approachable tone. Some contractions are fine, but "
        "avoid slang. Strike a balance between formal and conversational."
    ),
    HIGH: (
        "Use formal, polished language. Avoid contractions, slang, and overly casual "
        "expressions. Address the prospect respectfully and maintain a professional "
        "register throughout."
    ),
}

WARMTH: Dict[str, str] = {
    LOW: (
        "Keep the tone neutral and businesslike. Focus on facts and value rather than "
        "personal connection. Avoid excessive friendliness."
    ),
    MEDIUM: (
        "Maintain a moderately warm and personable tone. Show genuine interest in the "
        "prospect's work, but avoid being overly familiar or effusive."
    ),
    HIGH: (
        "Be genuinely warm, empathetic, and personable. Show real interest in the "
        "prospect as a person. Use language that builds rapport and makes the reader "
        "feel valued."
    ),
}

DIRECTNESS: Dict[str, str] = {
    LOW: (
        "Take an indirect, consultative approach. Lead with questions and curiosity "
        "rather than pitching. Let the value proposition emerge naturally through "
        "conversation."
    ),
    MEDIUM: (
        "Be moderately direct about the value proposition. State your purpose clearly "
        "but frame it as a mutual benefit rather than a hard sell."
    ),
    HIGH: (
        "Be very direct and to-the-point. State the value proposition upfront. "
        "Minimize fluff and respect the prospect's time with clear, action-oriented "
        "language."
    ),
}

HUMOR: Dict[str, str] = {
    LOW: "Keep the tone serious and professional. Avoid humor or lighthearted remarks.",
    MEDIUM: (
        "A light touch of wit is acceptable where natural, but don't force humor. "
        "Keep it professional."
    ),
    HIGH: (
        "Incorporate tasteful humor and clever observations where appropriate. Use wit "
        "to make the message memorable, but never at the prospect's expense."
    ),
}

ENTHUSIASM: Dict[str, str] = {
    LOW: "Maintain a calm, measured tone. Avoid exclamation marks and overly excited language.",
    MEDIUM: (
        "Show moderate enthusiasm about the opportunity. Be positive without being "
        "over-the-top."
    ),
    HIGH: (
        "Show genuine excitement and energy. Convey passion about the opportunity and "
        "how it could help the prospect. Enthusiastic but credible."
    ),
}


def translate_tov(
    formality: float,
    warmth: float,
    directness: float,
    humor: Optional[float] = None,
    enthusiasm: Optional[float] = None,
    custom_instructions: Optional[str] = None,
) -> str:
    """
    Translate tone axes into instruction paragraphs.

    Paragraph order is fixed: formality, warmth, directness, humor,
    enthusiasm, custom instructions. Humor and enthusiasm only contribute
    when supplied. Values are assumed to be validated to [0, 1] by the caller.

    Returns:
        Paragraphs joined by blank lines
    """
    parts = [
        FORMALITY[get_tier(formality)],
        WARMTH[get_tier(warmth)],
        DIRECTNESS[get_tier(directness)],
    ]

    if humor is not None:
        parts.append(HUMOR[get_tier(humor)])

    if enthusiasm is not None:
        parts.append(ENTHUSIASM[get_tier(enthusiasm)])

    if custom_instructions:
        parts.append(f"Additional instructions: {custom_instructions}")

    return "\n\n".join(parts)


def get_tov_label(formality: float, warmth: float, directness: float) -> str:
    """
    Short human-readable label for a tone configuration.

    Example:
        >>> get_tov_label(0.9, 0.2, 0.5)
        'Formal, Cool'
    """
    labels = []

    formality_tier = get_tier(formality)
    if formality_tier == HIGH:
        labels.append("Formal")
    elif formality_tier == LOW:
        labels.append("Casual")

    warmth_tier = get_tier(warmth)
    if warmth_tier == HIGH:
        labels.append("Warm")
    elif warmth_tier == LOW:
        labels.append("Cool")

    directness_tier = get_tier(directness)
    if directness_tier == HIGH:
        labels.append("Direct")
    elif directness_tier == LOW:
        labels.append("Consultative")

    return ", ".join(labels) if labels else "Balanced"
