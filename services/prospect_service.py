"""
Prospect lookup and synthesis.

Prospects are cached in the prospects table by normalized LinkedIn URL.
No live profile provider is wired in: a cache miss produces a profile from
a small set of known demo profiles, or a deterministic synthetic one
derived from the handle. Replace generate_profile_from_username() to plug
in a real enrichment provider.
"""

import re
from copy import deepcopy
from typing import Any, Dict, List

import logfire
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.prospect import Prospect
from pipeline.core.exceptions import ValidationError

_PROFILE_URL_PATTERN = re.compile(r"linkedin\.com/in/([a-z0-9_-]+)")
_HANDLE_PATTERN = re.compile(r"^@?([a-z0-9_-]+)$")

MAX_EXPERIENCES_IN_SUMMARY = 5
MAX_EDUCATION_IN_SUMMARY = 3
MAX_EXPERIENCE_DESCRIPTION = 200


def normalize_linkedin_url(identifier: str) -> str:
    """
    Normalize a profile URL or bare handle to https://www.linkedin.com/in/<handle>.

    Raises:
        ValidationError: If the identifier is neither
    """
    cleaned = (identifier or "").strip().rstrip("/").lower()

    match = _PROFILE_URL_PATTERN.search(cleaned)
    if match is None and "/" not in cleaned:
        match = _HANDLE_PATTERN.match(cleaned)

    if match is None:
        raise ValidationError("Invalid LinkedIn profile URL format")

    return f"https://www.linkedin.com/in/{match.group(1)}"


def extract_username(url: str) -> str:
    """Handle part of a normalized profile URL."""
    match = _PROFILE_URL_PATTERN.search(url.lower())
    if match is None:
        raise ValidationError("Cannot extract username from LinkedIn URL")
    return match.group(1)


# ===================================================================
# PROFILE SYNTHESIS
# ===================================================================

KNOWN_PROFILES: Dict[str, Dict[str, Any]] = {
    "williamhgates": {
        "public_identifier": "williamhgates",
        "first_name": "Bill",
        "last_name": "Gates",
        "full_name": "Bill Gates",
        "headline": "Co-chair, Bill & Melinda Gates Foundation",
        "summary": (
            "Co-chair of the Bill & Melinda Gates Foundation. Founder of Breakthrough "
            "Energy. Co-founder of Microsoft. Voracious reader. Avid traveler. Active blogger."
        ),
        "city": "Seattle",
        "state": "Washington",
        "country_full_name": "United States",
        "industry": "Philanthropy & Technology",
        "experiences": [
            {
                "company": "Bill & Melinda Gates Foundation",
                "title": "Co-chair",
                "starts_at": {"year": 2000, "month": 1},
                "ends_at": None,
                "description": (
                    "Guiding the foundation's efforts to tackle global challenges in "
                    "health, education, and poverty."
                ),
            },
            {
                "company": "Breakthrough Energy",
                "title": "Founder",
                "starts_at": {"year": 2015, "month": 1},
                "ends_at": None,
                "description": (
                    "Leading private-sector efforts to develop clean energy technologies "
                    "to address climate change."
                ),
            },
            {
                "company": "Microsoft",
                "title": "Co-founder & Technology Advisor",
                "starts_at": {"year": 1975, "month": 4},
                "ends_at": None,
                "description": (
                    "Co-founded Microsoft in 1975. Served as CEO until 2000, then as "
                    "Chairman and Technology Advisor."
                ),
            },
        ],
        "education": [
            {
                "school": "Harvard University",
                "degree_name": "Dropped out",
                "field_of_study": "Computer Science & Mathematics",
            },
            {
                "school": "Lakeside School",
                "degree_name": "High School Diploma",
                "field_of_study": "",
            },
        ],
    },
    "satlonadella": {
        "public_identifier": "satyanadella",
        "first_name": "Satya",
        "last_name": "Nadella",
        "full_name": "Satya Nadella",
        "headline": "Chairman and CEO at Microsoft",
        "summary": (
            "Chairman and CEO of Microsoft. Passionate about building technologies and "
            "platforms that empower every person and organization on the planet to "
            "achieve more."
        ),
        "city": "Redmond",
        "state": "Washington",
        "country_full_name": "United States",
        "industry": "Technology",
        "experiences": [
            {
                "company": "Microsoft",
                "title": "Chairman and CEO",
                "starts_at": {"year": 2014, "month": 2},
                "ends_at": None,
                "description": "Leading Microsoft's transformation to a cloud-first, AI-first company.",
            },
            {
                "company": "Microsoft",
                "title": "Executive Vice President, Cloud & Enterprise",
                "starts_at": {"year": 2011, "month": 1},
                "ends_at": {"year": 2014, "month": 2},
                "description": (
                    "Led the Cloud and Enterprise group building Azure into a major "
                    "cloud platform."
                ),
            },
        ],
        "education": [
            {
                "school": "University of Chicago Booth School of Business",
                "degree_name": "MBA",
                "field_of_study": "Business Administration",
            },
            {
                "school": "University of Wisconsin-Milwaukee",
                "degree_name": "MS",
                "field_of_study": "Computer Science",
            },
            {
                "school": "Manipal Institute of Technology",
                "degree_name": "BE",
                "field_of_study": "Electrical Engineering",
            },
        ],
    },
}

TITLES = [
    "Senior Software Engineer",
    "VP of Engineering",
    "Product Manager",
    "Head of Marketing",
    "Chief Technology Officer",
    "Director of Operations",
    "Senior Data Scientist",
    "Head of Sales",
    "Engineering Manager",
    "Chief Revenue Officer",
]

COMPANIES = [
    "Stripe", "Shopify", "Salesforce", "HubSpot", "Datadog",
    "Snowflake", "Figma", "Notion", "Vercel", "Confluent",
]

INDUSTRIES = [
    "Technology",
    "Software Development",
    "Financial Technology",
    "SaaS",
    "Cloud Computing",
    "Data Analytics",
    "Digital Marketing",
    "E-Commerce",
    "Cybersecurity",
    "Artificial Intelligence",
]

# CITIES and STATES are paired by index
CITIES = [
    "San Francisco", "New York", "Austin", "Seattle", "Boston",
    "Chicago", "Denver", "Los Angeles", "Miami", "Portland",
]

STATES = [
    "California", "New York", "Texas", "Washington", "Massachusetts",
    "Illinois", "Colorado", "California", "Florida", "Oregon",
]

SCHOOLS = [
    "Stanford University",
    "MIT",
    "UC Berkeley",
    "Carnegie Mellon University",
    "Georgia Tech",
    "University of Michigan",
    "Cornell University",
    "University of Texas at Austin",
    "Columbia University",
    "University of Washington",
]


def simple_hash(value: str) -> int:
    """Deterministic non-negative 32-bit string hash (h * 31 + c, wrapped)."""
    h = 0
    for char in value:
        h = ((h << 5) - h + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def _name_parts(username: str) -> List[str]:
    words = re.sub(r"\d+", "", re.sub(r"[-_]", " ", username)).split()
    return [word[:1].upper() + word[1:].lower() for word in words]


def generate_profile_from_username(username: str) -> Dict[str, Any]:
    """
    Build a profile for a handle.

    Known demo handles return their canned profile; anything else gets a
    plausible profile chosen deterministically from the handle's hash, so
    the same handle always yields the same person.
    """
    known = KNOWN_PROFILES.get(username.lower())
    if known is not None:
        return deepcopy(known)

    parts = _name_parts(username)
    first_name = parts[0] if parts else "Professional"
    last_name = parts[-1] if len(parts) > 1 else "User"
    full_name = " ".join(parts) if parts else "LinkedIn Professional"

    h = simple_hash(username)
    title_idx = h % len(TITLES)
    company_idx = (h >> 4) % len(COMPANIES)
    industry_idx = (h >> 8) % len(INDUSTRIES)
    city_idx = (h >> 12) % len(CITIES)
    school_idx = (h >> 16) % len(SCHOOLS)
    prev_company_idx = (company_idx + 3) % len(COMPANIES)
    prev_title_idx = (title_idx + 2) % len(TITLES)

    title = TITLES[title_idx]
    company = COMPANIES[company_idx]
    industry = INDUSTRIES[industry_idx]

    return {
        "public_identifier": username,
        "first_name": first_name,
        "last_name": last_name,
        "full_name": full_name,
        "headline": f"{title} at {company}",
        "summary": (
            f"Experienced {title.lower()} with a strong background in {industry.lower()}. "
            f"Passionate about building scalable solutions and leading high-performing "
            f"teams. Currently driving growth at {company}."
        ),
        "city": CITIES[city_idx],
        "state": STATES[city_idx],
        "country_full_name": "United States",
        "industry": industry,
        "experiences": [
            {
                "company": company,
                "title": title,
                "starts_at": {"year": 2021, "month": 3},
                "ends_at": None,
                "description": (
                    f"Leading key initiatives at {company}, driving product strategy and "
                    f"team growth in the {industry.lower()} space."
                ),
            },
            {
                "company": COMPANIES[prev_company_idx],
                "title": TITLES[prev_title_idx],
                "starts_at": {"year": 2017, "month": 6},
                "ends_at": {"year": 2021, "month": 2},
                "description": (
                    "Played a pivotal role in scaling the engineering team and launching "
                    "multiple successful product features."
                ),
            },
            {
                "company": "Early Career Startup",
                "title": "Software Engineer",
                "starts_at": {"year": 2014, "month": 1},
                "ends_at": {"year": 2017, "month": 5},
                "description": (
                    "Full-stack development in a fast-paced startup environment. "
                    "Contributed to core platform architecture."
                ),
            },
        ],
        "education": [
            {
                "school": SCHOOLS[school_idx],
                "degree_name": "BS",
                "field_of_study": "Computer Science",
            },
        ],
    }


def _prospect_from_profile(url: str, username: str, profile: Dict[str, Any]) -> Prospect:
    experiences = profile.get("experiences") or []
    current = experiences[0] if experiences else {}
    location = ", ".join(
        part for part in (profile.get("city"), profile.get("state"), profile.get("country_full_name"))
        if part
    )

    return Prospect(
        linkedin_url=url,
        linkedin_username=username,
        full_name=profile.get("full_name") or f"{profile.get('first_name', '')} {profile.get('last_name', '')}".strip(),
        headline=profile.get("headline") or None,
        summary=profile.get("summary") or None,
        current_company=current.get("company") or None,
        current_position=current.get("title") or None,
        location=location or None,
        industry=profile.get("industry") or None,
        profile_data=profile,
    )


def get_or_fetch_prospect(db: Session, identifier: str) -> Prospect:
    """
    Return the cached prospect for an identifier, creating it on a miss.

    Args:
        db: Database session (committed on insert)
        identifier: LinkedIn profile URL or bare handle

    Raises:
        ValidationError: If the identifier is not a profile URL or handle
    """
    url = normalize_linkedin_url(identifier)
    username = extract_username(url)

    existing = db.query(Prospect).filter(Prospect.linkedin_url == url).first()
    if existing:
        logfire.info("Prospect cache hit", username=username)
        return existing

    logfire.info("Generating prospect profile", username=username)
    prospect = _prospect_from_profile(url, username, generate_profile_from_username(username))
    db.add(prospect)

    try:
        db.commit()
    except IntegrityError:
        # Another request stored the same URL first
        db.rollback()
        logfire.warning("Prospect insert raced, reloading", username=username)
        return db.query(Prospect).filter(Prospect.linkedin_url == url).one()

    db.refresh(prospect)
    logfire.info("Stored prospect profile", username=username, prospect_id=str(prospect.id))
    return prospect


def build_profile_summary(prospect: Dict[str, Any]) -> str:
    """
    Render a prospect (see Prospect.to_dict()) as the profile text embedded
    in the analysis prompt.
    """
    parts = []

    if prospect.get("full_name"):
        parts.append(f"Name: {prospect['full_name']}")
    if prospect.get("headline"):
        parts.append(f"Headline: {prospect['headline']}")
    if prospect.get("current_position") and prospect.get("current_company"):
        parts.append(f"Current Role: {prospect['current_position']} at {prospect['current_company']}")
    if prospect.get("location"):
        parts.append(f"Location: {prospect['location']}")
    if prospect.get("industry"):
        parts.append(f"Industry: {prospect['industry']}")
    if prospect.get("summary"):
        parts.append(f"Summary: {prospect['summary']}")

    profile_data = prospect.get("profile_data")
    if not isinstance(profile_data, dict):
        return "\n".join(parts)

    experiences = profile_data.get("experiences")
    if isinstance(experiences, list):
        lines = []
        for exp in experiences[:MAX_EXPERIENCES_IN_SUMMARY]:
            if not isinstance(exp, dict):
                continue
            line = f"  - {exp.get('title') or 'Unknown Role'} at {exp.get('company') or 'Unknown Company'}"
            if exp.get("description"):
                line += f": {str(exp['description'])[:MAX_EXPERIENCE_DESCRIPTION]}"
            lines.append(line)
        parts.append("Experience:\n" + "\n".join(lines))

    education = profile_data.get("education")
    if isinstance(education, list):
        lines = []
        for edu in education[:MAX_EDUCATION_IN_SUMMARY]:
            if not isinstance(edu, dict):
                continue
            lines.append(
                f"  - {edu.get('degree_name') or ''} {edu.get('field_of_study') or ''} "
                f"at {edu.get('school') or 'Unknown School'}"
            )
        parts.append("Education:\n" + "\n".join(lines))

    return "\n".join(parts)
