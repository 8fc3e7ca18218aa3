"""
Sequence Composer Step

Generates the personalized message sequence (pass 2) from the tone
instructions, the company context and the prospect analysis.
"""

from .main import SequenceComposerStep

__all__ = ["SequenceComposerStep"]
