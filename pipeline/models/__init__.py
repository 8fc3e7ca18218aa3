"""
Models package for Pipeline models

NOTE: not database models
"""

from .core import (
    # Enums
    SequenceStatus,
    GenerationPhase,
    AttemptStatus,
    MessageType,
    SEQUENCE_TRANSITIONS,

    # Core data models
    GenerationData,
    StepResult,
)

__all__ = [
    # Enums
    "SequenceStatus",
    "GenerationPhase",
    "AttemptStatus",
    "MessageType",
    "SEQUENCE_TRANSITIONS",

    # Core data models
    "GenerationData",
    "StepResult",
]
