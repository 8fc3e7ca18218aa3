"""
Prospect Analyzer Database Utilities

Persists the normalized analysis onto the sequence row.
"""

import logfire
from typing import Any, Dict, Optional
from uuid import UUID

from database.session import SessionFactory, get_db_context
from models.message_sequence import MessageSequence
from pipeline.core.exceptions import NotFoundError


def save_prospect_analysis(
    sequence_id: UUID,
    analysis: Dict[str, Any],
    session_factory: Optional[SessionFactory] = None
) -> None:
    """
    Store the analysis on message_sequences and bump updated_at.

    Committed before pass 2 starts so a later failure keeps it for diagnosis.

    Raises:
        NotFoundError: If the sequence row does not exist
    """
    with get_db_context(session_factory) as db:
        sequence = db.query(MessageSequence).filter(MessageSequence.id == sequence_id).first()
        if sequence is None:
            raise NotFoundError(f"Sequence not found: {sequence_id}")

        sequence.prospect_analysis = analysis
        sequence.touch()
        db.commit()

    logfire.info(
        "Prospect analysis saved",
        sequence_id=str(sequence_id),
        seniority_level=analysis.get("seniority_level"),
        hooks=len(analysis.get("personalization_hooks", []))
    )
