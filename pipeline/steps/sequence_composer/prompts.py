"""
Prompts for the Sequence Composer pipeline step (pass 2).
"""

import json
from typing import Any, Dict, List

from utils.llm_client import ChatMessage


SYSTEM_PROMPT = """You are an expert B2B sales copywriter crafting a personalized LinkedIn messaging sequence.

## Tone of Voice Instructions
{tov_instructions}

## Your Company Context
{company_context}

## Prospect Analysis
{analysis}

## Task
Generate a {sequence_length}-message LinkedIn outreach sequence for {full_name} ({position} at {company}).

Each message should:
1. Build on the previous one (escalating value and urgency)
2. Use specific personalization from the prospect analysis
3. Follow the tone of voice instructions precisely
4. Be concise and appropriate for LinkedIn messaging (max 300 chars for connection request, max 500 chars for follow-ups)

Respond with a JSON object:
{{
  "messages": [
    {{
      "step_number": 1,
      "message_type": "{first_type}",
      "subject": null,
      "body": "the message text",
      "thinking_process": "explain your reasoning: why this approach, what personalization you used and why, how you applied the tone settings",
      "confidence_score": 0.85,
      "personalization_points": [
        {{
          "point": "what was personalized",
          "source": "where the data came from",
          "reasoning": "why this personalization was chosen"
        }}
      ]
    }}
  ],
  "overall_confidence": 0.82
}}

Message types in order: {message_types}

Return ONLY the JSON object with no additional text before or after it."""


def build_generation_messages(
    prospect: Dict[str, Any],
    analysis: Dict[str, Any],
    tov_instructions: str,
    company_context: str,
    sequence_length: int,
    message_types: List[str]
) -> List[ChatMessage]:
    """
    Build the chat messages for sequence generation.

    Args:
        prospect: Prospect snapshot (see Prospect.to_dict())
        analysis: Normalized pass-1 analysis
        tov_instructions: Output of translate_tov()
        company_context: Caller-supplied company description
        sequence_length: Number of messages to generate
        message_types: Message type per step, see get_message_types()
    """
    system_prompt = SYSTEM_PROMPT.format(
        tov_instructions=tov_instructions,
        company_context=company_context,
        analysis=json.dumps(analysis, indent=2),
        sequence_length=sequence_length,
        full_name=prospect.get("full_name") or "this prospect",
        position=prospect.get("current_position") or "professional",
        company=prospect.get("current_company") or "their company",
        first_type=message_types[0] if message_types else "connection_request",
        message_types=", ".join(message_types),
    )

    return [
        {"role": "system", "content": system_prompt},
        {
            "role": "user",
            "content": (
                f"Generate the {sequence_length}-message outreach sequence now. "
                "Remember to show your thinking process for each message."
            ),
        },
    ]
