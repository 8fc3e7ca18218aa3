"""
Prompts for the Prospect Analyzer pipeline step (pass 1).
"""

from typing import List

from utils.llm_client import ChatMessage


SYSTEM_PROMPT = """You are an expert sales researcher and B2B outreach strategist. Analyze the following LinkedIn prospect profile and provide a structured analysis for personalized outreach.

Your company context: "{company_context}"

Respond with a JSON object containing:
{{
  "professional_summary": "2-3 sentence summary of their career and current role",
  "key_interests": ["list of professional interests based on their profile"],
  "potential_pain_points": ["business challenges they likely face given their role and industry"],
  "personalization_hooks": [
    {{
      "hook": "specific detail to reference",
      "source": "where in their profile this came from",
      "relevance": "why this is relevant to your outreach"
    }}
  ],
  "recommended_angles": ["messaging angles most likely to resonate"],
  "seniority_level": "entry|mid|senior|executive"
}}

Return ONLY the JSON object with no additional text before or after it."""


def build_analysis_messages(profile_summary: str, company_context: str) -> List[ChatMessage]:
    """
    Build the chat messages for prospect analysis.

    Args:
        profile_summary: Output of services.prospect_service.build_profile_summary
        company_context: Caller-supplied description of the sender's company

    Returns:
        System and user messages
    """
    return [
        {
            "role": "system",
            "content": SYSTEM_PROMPT.format(company_context=company_context),
        },
        {
            "role": "user",
            "content": f"Analyze this prospect for personalized outreach:\n\n{profile_summary}",
        },
    ]
