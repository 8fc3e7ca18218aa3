"""
Prospect Analyzer Step

Analyzes the prospect profile (pass 1) to extract:
- Professional summary and seniority
- Interests and likely pain points
- Personalization hooks and recommended messaging angles
"""

from .main import ProspectAnalyzerStep

__all__ = ["ProspectAnalyzerStep"]
