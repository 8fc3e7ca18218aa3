"""Core data models for the sequence generation pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, List
from datetime import datetime, timezone
from uuid import UUID


class SequenceStatus(str, Enum):
    """Lifecycle of a message sequence. Moves forward only."""
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SequenceStatus.COMPLETED, SequenceStatus.FAILED)

    def can_transition_to(self, target: "SequenceStatus") -> bool:
        """Check a status change against the forward-only transition table."""
        return target in SEQUENCE_TRANSITIONS[self]


SEQUENCE_TRANSITIONS: Dict[SequenceStatus, frozenset] = {
    SequenceStatus.PENDING: frozenset({SequenceStatus.GENERATING}),
    SequenceStatus.GENERATING: frozenset({SequenceStatus.COMPLETED, SequenceStatus.FAILED}),
    SequenceStatus.COMPLETED: frozenset(),
    SequenceStatus.FAILED: frozenset(),
}


class GenerationPhase(str, Enum):
    """Which model pass an attempt belongs to."""
    PROFILE_ANALYSIS = "profile_analysis"
    SEQUENCE_GENERATION = "sequence_generation"


class AttemptStatus(str, Enum):
    """
    Outcome of a single model call.

    TIMEOUT marks the last permitted attempt under a model, whatever the
    underlying failure was.
    """
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


class MessageType(str, Enum):
    """Outreach message kinds, in canonical sequence order."""
    CONNECTION_REQUEST = "connection_request"
    FOLLOW_UP_VALUE = "follow_up_value"
    CASE_STUDY = "case_study"
    SOCIAL_PROOF = "social_proof"
    DIRECT_ASK = "direct_ask"
    BREAKUP = "breakup"


@dataclass
class GenerationData:
    """
    In-memory state passed between pipeline steps.

    The sequence row is created before the pipeline starts; each step
    persists its own output and mirrors it here for the next step.
    """

    # Input data (set by the sequence generator)
    sequence_id: UUID
    """Primary key of the message_sequences row being generated"""

    prospect: Dict[str, Any]
    """
    Snapshot of the prospect row (see Prospect.to_dict()), including the
    parsed profile_data blob.
    """

    company_context: str
    """Free-text description of the sender's company and offer"""

    sequence_length: int
    """Requested number of messages (1-10)"""

    tov_instructions: str
    """Tone paragraphs produced by the tone translator"""

    # Step 1 outputs (ProspectAnalyzer)
    prospect_analysis: Dict[str, Any] = field(default_factory=dict)
    """Normalized analysis: summary, interests, pain points, hooks, angles, seniority"""

    # Step 2 outputs (SequenceComposer)
    messages: List[Dict[str, Any]] = field(default_factory=list)
    """Normalized messages as written to sequence_messages, ordered by step"""

    overall_confidence: Optional[float] = None
    """Model's confidence in the sequence as a whole, in [0, 1]"""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Per-step facts for logging: models used, recovery stages, message ids"""

    # Transient data (logged to Logfire, not persisted)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    step_timings: Dict[str, float] = field(default_factory=dict)

    errors: List[str] = field(default_factory=list)

    # ===================================================================
    # HELPER METHODS
    # ===================================================================

    def total_duration(self) -> float:
        """Calculate total pipeline execution time in seconds"""
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()

    def add_timing(self, step_name: str, duration: float) -> None:
        """Record step timing"""
        self.step_timings[step_name] = duration

    def add_error(self, step_name: str, error_message: str) -> None:
        """Record a step failure for the run summary"""
        self.errors.append(f"{step_name}: {error_message}")


# ===================================================================
# STEP RESULT
# ===================================================================

@dataclass
class StepResult:
    """
    Result of a pipeline step execution.

    Returned by BasePipelineStep.execute() to indicate success/failure.
    """

    success: bool
    """Whether the step completed successfully"""

    step_name: str
    """Name of the step that produced this result"""

    error: Optional[str] = None
    """Error message if success=False"""

    metadata: Optional[Dict[str, Any]] = None
    """
    Optional metadata about execution:
    - duration: float (seconds)
    - model: str
    - recovery_stage: str
    """

    warnings: List[str] = field(default_factory=list)
    """Non-fatal warnings (e.g., 'model returned extra messages')"""

    def __post_init__(self):
        """Validation: if success=False, error must be set"""
        if not self.success and not self.error:
            raise ValueError("StepResult with success=False must have error message")
