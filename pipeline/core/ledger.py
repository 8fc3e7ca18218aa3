"""
Generation ledger: append-only audit trail of model call attempts.

Every attempt, successful or not, is written before the executor returns
or retries. A ledger write failure propagates; it is never swallowed.
"""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

import logfire

from database.session import SessionFactory, get_db_context
from models.ai_generation import AIGeneration
from pipeline.models.core import AttemptStatus, GenerationPhase


@dataclass(frozen=True)
class AttemptRecord:
    """One model call attempt as written to ai_generations."""

    sequence_id: UUID
    phase: GenerationPhase
    model: str
    status: AttemptStatus
    raw_prompt: str
    latency_ms: int
    raw_response: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    estimated_cost_usd: Optional[float] = None
    error_message: Optional[str] = None


class AttemptLedger(Protocol):
    """Sink for attempt records."""

    def record(self, attempt: AttemptRecord) -> None:
        ...


class DatabaseLedger:
    """Writes each attempt to ai_generations in its own committed transaction."""

    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory

    def record(self, attempt: AttemptRecord) -> None:
        with get_db_context(self.session_factory) as db:
            db.add(AIGeneration(
                sequence_id=attempt.sequence_id,
                generation_type=attempt.phase.value,
                model=attempt.model,
                prompt_tokens=attempt.prompt_tokens,
                completion_tokens=attempt.completion_tokens,
                total_tokens=attempt.total_tokens,
                estimated_cost_usd=attempt.estimated_cost_usd,
                latency_ms=attempt.latency_ms,
                raw_prompt=attempt.raw_prompt,
                raw_response=attempt.raw_response,
                status=attempt.status.value,
                error_message=attempt.error_message,
            ))
            db.commit()

        logfire.debug(
            "Generation attempt recorded",
            sequence_id=str(attempt.sequence_id),
            phase=attempt.phase.value,
            model=attempt.model,
            status=attempt.status.value
        )
