"""
Models module initialization.
Imports all SQLAlchemy models for Alembic autodiscovery.
"""

from models.prospect import Prospect
from models.tov_config import TovConfig
from models.message_sequence import MessageSequence
from models.sequence_message import SequenceMessage
from models.ai_generation import AIGeneration

__all__ = [
    "Prospect",
    "TovConfig",
    "MessageSequence",
    "SequenceMessage",
    "AIGeneration",
]
