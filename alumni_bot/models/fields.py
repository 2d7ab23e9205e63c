# Role: Closed set of profile fields plus the option lists behind the multiple-choice fields.
# Canonical order matters: it is the order fields are collected in.

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple


class ProfileField(str, Enum):
    FULL_NAME = "full_name"
    GENDER = "gender"
    DATE_OF_BIRTH = "date_of_birth"
    COUNTRY = "country"
    STATE = "state"
    CITY = "city"
    PHONE = "phone"
    ADDITIONAL_EMAIL = "additional_email"
    LINKEDIN = "linkedin"
    INSTAGRAM = "instagram"
    DOMAIN = "domain"
    PROFESSIONAL_ROLE = "professional_role"
    YATRA_IMPACT = "yatra_impact"
    COMMUNITY_ASKS = "community_asks"
    COMMUNITY_GIVES = "community_gives"

    @classmethod
    def parse(cls, name: object) -> Optional["ProfileField"]:
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip())
        except ValueError:
            return None


FIELD_ORDER: Tuple[ProfileField, ...] = tuple(ProfileField)

# Offered during a completion pass but never required for search access.
OPTIONAL_FIELDS: Tuple[ProfileField, ...] = (
    ProfileField.ADDITIONAL_EMAIL,
    ProfileField.INSTAGRAM,
)

REQUIRED_FIELDS: Tuple[ProfileField, ...] = tuple(f for f in FIELD_ORDER if f not in OPTIONAL_FIELDS)

LIST_FIELDS: Tuple[ProfileField, ...] = (
    ProfileField.YATRA_IMPACT,
    ProfileField.COMMUNITY_ASKS,
    ProfileField.COMMUNITY_GIVES,
)

GENDERS: Tuple[str, ...] = ("Male", "Female", "Others")

PROFESSIONAL_ROLES: Tuple[str, ...] = (
    "Entrepreneur / Founder",
    "Working Professional",
    "Student",
    "Freelancer / Consultant",
    "Government / Public Sector",
    "NGO / Social Sector",
    "Academic / Researcher",
    "Investor",
    "Other",
)

DOMAINS: Tuple[str, ...] = (
    "Technology",
    "Healthcare",
    "Education",
    "Agriculture",
    "Finance / Fintech",
    "Manufacturing",
    "Retail / E-commerce",
    "Energy / Cleantech",
    "Media / Communications",
    "Social Impact",
    "Government / Policy",
    "Consulting",
    "Real Estate",
    "Tourism / Hospitality",
    "Arts / Culture",
    "Other",
)

YATRA_IMPACT: Tuple[str, ...] = (
    "Started or grew a venture",
    "Changed my career direction",
    "Built a lasting peer network",
)

COMMUNITY_ASKS: Tuple[str, ...] = (
    "Mentorship",
    "Funding / Investment",
    "Technical guidance",
    "Market access",
    "Hiring / Talent",
    "Partnerships",
    "Marketing support",
    "Legal / Compliance advice",
    "Product feedback",
    "Government connects",
    "Media exposure",
    "Peer support",
)

COMMUNITY_GIVES: Tuple[str, ...] = (
    "Mentoring",
    "Investing",
    "Technical expertise",
    "Industry connections",
    "Hiring opportunities",
    "Speaking at events",
    "Volunteering",
    "Office space / resources",
    "Marketing expertise",
    "Legal / Finance expertise",
    "Product feedback",
    "Peer support",
)
