"""
Sequence Composer Step Models

Message-type vocabulary and normalization of the pass-2 result.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from pipeline.core.exceptions import ParseError
from pipeline.models.core import MessageType

CANONICAL_MESSAGE_TYPES: List[str] = [member.value for member in MessageType]

# Used for positions past the six-element vocabulary (sequences of 7-10)
OVERFLOW_MESSAGE_TYPE = MessageType.FOLLOW_UP_VALUE.value

MAX_SUBJECT_LENGTH = 500


def get_message_types(length: int) -> List[str]:
    """
    Message types to request for a sequence of the given length.

    Short sequences are special-cased so they still end with an ask:
        >>> get_message_types(3)
        ['connection_request', 'follow_up_value', 'direct_ask']
    """
    if length <= 1:
        return [MessageType.CONNECTION_REQUEST.value]
    if length == 2:
        return [MessageType.CONNECTION_REQUEST.value, MessageType.FOLLOW_UP_VALUE.value]
    if length == 3:
        return [
            MessageType.CONNECTION_REQUEST.value,
            MessageType.FOLLOW_UP_VALUE.value,
            MessageType.DIRECT_ASK.value,
        ]
    return CANONICAL_MESSAGE_TYPES[:length]


def message_type_for_position(vocabulary: List[str], index: int) -> str:
    """Vocabulary entry for a zero-based position."""
    if index < len(vocabulary):
        return vocabulary[index]
    return OVERFLOW_MESSAGE_TYPE


def clamp_confidence(value: Any) -> Optional[float]:
    """Clamp a numeric confidence to [0, 1]; None when not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return min(1.0, max(0.0, float(value)))


class PersonalizationPoint(BaseModel):
    """What was personalized in a message, where it came from, and why."""

    point: str = ""
    source: str = ""
    reasoning: str = ""

    @field_validator("point", "source", "reasoning", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)


class GeneratedMessage(BaseModel):
    """A single normalized message, as written to sequence_messages."""

    step_number: int = Field(ge=1)
    message_type: str
    subject: Optional[str] = None
    body: str
    thinking_process: str = ""
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    personalization_points: List[PersonalizationPoint] = Field(default_factory=list)


def _step_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _personalization_points(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def normalize_generated_messages(
    raw_messages: Any,
    sequence_length: int
) -> Tuple[List[Dict[str, Any]], List[str]]:
    """
    Validate and normalize the pass-2 messages array.

    Rules:
    - must be a list of objects with a non-empty string body
    - fewer than sequence_length messages is an error; extras are dropped
    - the model's step numbers are kept only when they are exactly 1..N,
      otherwise every message is renumbered by array position
    - unknown or missing message types fall back to the vocabulary
    - confidence is clamped to [0, 1], missing means 0.0

    Returns:
        (messages ordered by step_number, warnings)

    Raises:
        ParseError: If the array is missing, short or malformed
    """
    if not isinstance(raw_messages, list):
        raise ParseError("AI returned invalid JSON for sequence generation: missing messages array")

    warnings = []

    for index, item in enumerate(raw_messages):
        if not isinstance(item, dict):
            raise ParseError(
                f"AI returned invalid JSON for sequence generation: message {index + 1} is not an object",
                raw_text=repr(item)
            )

    if len(raw_messages) < sequence_length:
        raise ParseError(
            f"AI returned {len(raw_messages)} messages, expected {sequence_length}"
        )

    if len(raw_messages) > sequence_length:
        warnings.append(
            f"Model returned {len(raw_messages)} messages, keeping the first {sequence_length}"
        )
        raw_messages = raw_messages[:sequence_length]

    model_steps = [_step_number(item.get("step_number")) for item in raw_messages]
    if sorted(s for s in model_steps if s is not None) == list(range(1, sequence_length + 1)):
        step_numbers = model_steps
    else:
        step_numbers = list(range(1, sequence_length + 1))
        if any(s is not None for s in model_steps):
            warnings.append("Model step numbers were not 1..N, renumbered by position")

    vocabulary = get_message_types(sequence_length)
    messages = []

    for item, step_number in zip(raw_messages, step_numbers):
        body = item.get("body")
        if not isinstance(body, str) or not body.strip():
            raise ParseError(
                f"AI returned invalid JSON for sequence generation: message {step_number} has no body"
            )

        expected_type = message_type_for_position(vocabulary, step_number - 1)
        message_type = item.get("message_type")
        if message_type not in CANONICAL_MESSAGE_TYPES:
            if message_type:
                warnings.append(
                    f"Unknown message type {message_type!r} at step {step_number}, using {expected_type}"
                )
            message_type = expected_type

        subject = item.get("subject")
        subject = subject.strip()[:MAX_SUBJECT_LENGTH] if isinstance(subject, str) and subject.strip() else None

        thinking = item.get("thinking_process")

        confidence = clamp_confidence(item.get("confidence_score"))

        message = GeneratedMessage(
            step_number=step_number,
            message_type=message_type,
            subject=subject,
            body=body.strip(),
            thinking_process=thinking if isinstance(thinking, str) else "",
            confidence_score=confidence if confidence is not None else 0.0,
            personalization_points=_personalization_points(item.get("personalization_points")),
        )
        messages.append(message.model_dump())

    messages.sort(key=lambda m: m["step_number"])
    return messages, warnings


def resolve_overall_confidence(raw_value: Any, messages: List[Dict[str, Any]]) -> float:
    """Model's overall confidence, or the mean of message confidences when absent."""
    confidence = clamp_confidence(raw_value)
    if confidence is not None:
        return confidence
    if not messages:
        return 0.0
    return sum(m["confidence_score"] for m in messages) / len(messages)


def parse_sequence_result(
    raw: Any,
    sequence_length: int
) -> Tuple[List[Dict[str, Any]], float, List[str]]:
    """
    Turn a recovered pass-2 value into (messages, overall_confidence, warnings).

    Raises:
        ParseError: If the value is not an object with a messages array
    """
    if not isinstance(raw, dict) or "messages" not in raw:
        raise ParseError(
            "AI returned invalid JSON for sequence generation: missing messages array",
            raw_text=repr(raw)
        )

    messages, warnings = normalize_generated_messages(raw["messages"], sequence_length)
    overall = resolve_overall_confidence(raw.get("overall_confidence"), messages)
    return messages, overall, warnings
