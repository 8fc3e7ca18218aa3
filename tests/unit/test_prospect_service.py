"""
Tests for prospect URL normalization, profile synthesis and the prospect cache.
"""

import pytest

from models.prospect import Prospect
from pipeline.core.exceptions import ValidationError
from services.prospect_service import (
    COMPANIES,
    TITLES,
    build_profile_summary,
    extract_username,
    generate_profile_from_username,
    get_or_fetch_prospect,
    normalize_linkedin_url,
    simple_hash,
)


# ===================================================================
# TESTS - URL normalization
# ===================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    "identifier",
    [
        "https://www.linkedin.com/in/jane-doe",
        "https://www.linkedin.com/in/jane-doe/",
        "http://linkedin.com/in/Jane-Doe",
        "  linkedin.com/in/jane-doe  ",
        "jane-doe",
        "@jane-doe",
    ],
)
def test_normalize_accepts_urls_and_handles(identifier):
    assert normalize_linkedin_url(identifier) == "https://www.linkedin.com/in/jane-doe"


@pytest.mark.unit
@pytest.mark.parametrize(
    "identifier",
    [
        "",
        "https://example.com/jane",
        "https://www.linkedin.com/company/acme",
        "jane doe",
    ],
)
def test_normalize_rejects_non_profiles(identifier):
    with pytest.raises(ValidationError, match="Invalid LinkedIn profile URL format"):
        normalize_linkedin_url(identifier)


@pytest.mark.unit
def test_extract_username():
    assert extract_username("https://www.linkedin.com/in/jane-doe") == "jane-doe"


# ===================================================================
# TESTS - Profile synthesis
# ===================================================================

@pytest.mark.unit
def test_known_profile_is_returned_as_copy():
    profile = generate_profile_from_username("williamhgates")
    profile["full_name"] = "Changed"

    assert generate_profile_from_username("williamhgates")["full_name"] == "Bill Gates"


@pytest.mark.unit
def test_synthetic_profile_is_deterministic():
    first = generate_profile_from_username("jane-doe-42")
    second = generate_profile_from_username("jane-doe-42")

    assert first == second
    assert first["full_name"] == "Jane Doe"
    assert first["first_name"] == "Jane"
    assert first["last_name"] == "Doe"
    assert first["experiences"][0]["title"] in TITLES
    assert first["experiences"][0]["company"] in COMPANIES
    assert first["headline"] == f"{first['experiences'][0]['title']} at {first['experiences'][0]['company']}"


@pytest.mark.unit
def test_single_word_handle_gets_placeholder_last_name():
    profile = generate_profile_from_username("madonna")

    assert profile["full_name"] == "Madonna"
    assert profile["last_name"] == "User"


@pytest.mark.unit
def test_simple_hash_is_stable_and_non_negative():
    assert simple_hash("") == 0
    assert simple_hash("a") == 97
    assert simple_hash("ab") == 97 * 31 + 98
    assert simple_hash("some-long-linkedin-handle") >= 0


# ===================================================================
# TESTS - Cache
# ===================================================================

@pytest.mark.unit
def test_cache_miss_stores_prospect(db):
    prospect = get_or_fetch_prospect(db, "https://linkedin.com/in/williamhgates/")

    assert prospect.id is not None
    assert prospect.linkedin_url == "https://www.linkedin.com/in/williamhgates"
    assert prospect.linkedin_username == "williamhgates"
    assert prospect.full_name == "Bill Gates"
    assert prospect.current_company == "Bill & Melinda Gates Foundation"
    assert prospect.location == "Seattle, Washington, United States"
    assert prospect.profile_data["experiences"][0]["title"] == "Co-chair"


@pytest.mark.unit
def test_cache_hit_returns_same_row(db):
    first = get_or_fetch_prospect(db, "jane-doe")
    second = get_or_fetch_prospect(db, "https://www.linkedin.com/in/JANE-DOE")

    assert first.id == second.id
    assert db.query(Prospect).count() == 1


@pytest.mark.unit
def test_invalid_identifier_stores_nothing(db):
    with pytest.raises(ValidationError):
        get_or_fetch_prospect(db, "not a profile")

    assert db.query(Prospect).count() == 0


# ===================================================================
# TESTS - Profile summary
# ===================================================================

@pytest.mark.unit
def test_profile_summary_limits_experience_and_education():
    experiences = [
        {"title": f"Role {i}", "company": f"Company {i}", "description": "x" * 500}
        for i in range(8)
    ]
    education = [{"school": f"School {i}", "degree_name": "BS", "field_of_study": "CS"} for i in range(5)]

    summary = build_profile_summary({
        "full_name": "Jane Doe",
        "headline": "VP Engineering",
        "current_position": "VP Engineering",
        "current_company": "Acme",
        "profile_data": {"experiences": experiences, "education": education},
    })

    assert "Name: Jane Doe" in summary
    assert "Current Role: VP Engineering at Acme" in summary
    assert "Role 4 at Company 4" in summary
    assert "Role 5" not in summary
    assert "School 2" in summary
    assert "School 3" not in summary
    assert "x" * 200 in summary
    assert "x" * 201 not in summary


@pytest.mark.unit
def test_profile_summary_without_profile_data():
    summary = build_profile_summary({"full_name": "Jane Doe", "profile_data": None})

    assert summary == "Name: Jane Doe"
