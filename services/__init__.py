"""
Services module for business logic shared by the pipeline and API.

The sequence generator lives in services.sequence_generator and is imported
by path, since it depends on the pipeline steps which depend on this package.
"""

from services.prospect_service import (
    build_profile_summary,
    get_or_fetch_prospect,
    normalize_linkedin_url,
)
from services.tov_translator import get_tov_label, translate_tov

__all__ = [
    "build_profile_summary",
    "get_or_fetch_prospect",
    "normalize_linkedin_url",
    "get_tov_label",
    "translate_tov",
]
