"""
Shared helpers: the model-call client and JSON recovery for model output.
"""

from utils.json_recovery import RecoveryResult, recover_json, try_recover
from utils.llm_client import ChatMessage, ModelClient, ModelResponse, OpenAICompatibleClient

__all__ = [
    "RecoveryResult",
    "recover_json",
    "try_recover",
    "ChatMessage",
    "ModelClient",
    "ModelResponse",
    "OpenAICompatibleClient",
]
