"""
Sequence Composer Database Utilities

Database operations for writing generated messages.
"""

import logfire
from typing import Any, Dict, List, Optional
from uuid import UUID

from database.session import SessionFactory, get_db_context
from models.sequence_message import SequenceMessage


def write_messages_to_db(
    sequence_id: UUID,
    messages: List[Dict[str, Any]],
    session_factory: Optional[SessionFactory] = None
) -> List[UUID]:
    """
    Insert one sequence_messages row per normalized message, in step order.

    All rows are written in a single transaction.

    Returns:
        Message UUIDs in step order
    """
    logfire.info(
        "Writing messages to database",
        sequence_id=str(sequence_id),
        message_count=len(messages)
    )

    with get_db_context(session_factory) as db:
        rows = [
            SequenceMessage(
                sequence_id=sequence_id,
                step_number=message["step_number"],
                message_type=message["message_type"],
                subject=message.get("subject"),
                body=message["body"],
                thinking_process=message.get("thinking_process") or None,
                confidence_score=message.get("confidence_score"),
                personalization_points=message.get("personalization_points", []),
            )
            for message in messages
        ]
        db.add_all(rows)
        db.flush()
        message_ids = [row.id for row in rows]
        db.commit()

    logfire.info(
        "Messages written to database successfully",
        sequence_id=str(sequence_id),
        message_ids=[str(message_id) for message_id in message_ids]
    )

    return message_ids
