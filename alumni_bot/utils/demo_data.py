# Role: A handful of alumni records for local runs (CLI, API with SEED_DEMO_DATA=1).
# DEMO_PHONE is deliberately incomplete so the profile flow is reachable on the first message.

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

from alumni_bot.models.user_record import BasicProfile, EnhancedProfile, UserMetadata, UserRecord
from alumni_bot.services.user_store import InMemoryUserStore

DEMO_PHONE = "919876543210"


def _complete(identity: str, name: str, email: str, about: str, **enhanced) -> UserRecord:
    base = dict(
        full_name=name,
        gender="Female",
        date_of_birth="12-03-1992",
        country="India",
        phone=f"+{identity}",
        linkedin=f"https://linkedin.com/in/{name.split()[0].lower()}",
        yatra_impact=["Built a lasting peer network"],
        community_asks=["Partnerships"],
        completed=True,
    )
    base.update(enhanced)
    return UserRecord(
        identity=identity,
        basic_profile=BasicProfile(name=name, email=email, about=about),
        enhanced_profile=EnhancedProfile(**base),
        metadata=UserMetadata(last_active=datetime.now(timezone.utc) - timedelta(days=3)),
    )


def demo_users() -> List[UserRecord]:
    return [
        UserRecord(
            identity=DEMO_PHONE,
            basic_profile=BasicProfile(name="Asha", email="asha@example.com"),
            enhanced_profile=EnhancedProfile(full_name="Asha Rao", gender="Female", country="India"),
        ),
        _complete(
            "919811111111",
            "Priya Sharma",
            "priya@example.com",
            "Fintech founder building payments for rural India.",
            state="Maharashtra",
            city="Mumbai",
            domain="Finance / Fintech",
            professional_role="Entrepreneur / Founder",
            community_gives=["Mentoring", "Industry connections"],
        ),
        _complete(
            "919822222222",
            "Rahul Verma",
            "rahul@example.com",
            "React and Node developer, loves open source.",
            gender="Male",
            state="Karnataka",
            city="Bangalore",
            domain="Technology",
            professional_role="Working Professional",
            community_gives=["Technical expertise"],
        ),
        _complete(
            "919833333333",
            "Meera Iyer",
            "meera@example.com",
            "Digital marketing consultant for D2C brands.",
            state="Tamil Nadu",
            city="Chennai",
            domain="Media / Communications",
            professional_role="Freelancer / Consultant",
            community_gives=["Marketing expertise", "Mentoring"],
        ),
    ]


def seed_demo_users(store: InMemoryUserStore) -> int:
    users = demo_users()
    for user in users:
        store.add(user)
    return len(users)
