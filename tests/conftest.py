import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from catalog import VaccineCatalog, default_catalog
from models import VerificationResult
from schedule_engine import ScheduleEngine
from verification import VerificationCache

TODAY = date(2025, 6, 15)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeVerifier:
    """In-memory stand-in for the trusted-source lookup."""

    def __init__(self, clock, unverified=(), failing=(), slow=()):
        self.clock = clock
        self.unverified = set(unverified)
        self.failing = set(failing)
        self.slow = set(slow)
        self.calls = []

    async def lookup(self, record):
        self.calls.append(record.id)
        if record.id in self.failing:
            raise RuntimeError("source lookup exploded")
        if record.id in self.slow:
            await asyncio.sleep(1)
        verified = record.id not in self.unverified
        return VerificationResult(
            vaccine_id=record.id,
            verified=verified,
            sources=list(record.sources) if verified else [],
            last_verified_timestamp=self.clock(),
            confidence=record.confidence if verified else 0.5,
        )


def make_record(**overrides):
    record = {
        "id": "sample",
        "name": "Sample vaccine",
        "synonyms": [],
        "vaccine_type": "inactivated",
        "target_age_groups": ["birth"],
        "schedule": [{"dose_number": 1, "timing": {"kind": "from_birth", "days": 0, "label": "At birth"}}],
        "diseases_prevented": ["Sample disease"],
        "contraindications": [],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹100"},
        "evidence_level": "high",
        "confidence": 0.9,
        "sources": [{"title": "WHO", "url": "https://www.who.int", "retrieved_date": "2025-01-15"}],
    }
    record.update(overrides)
    return record


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def engine(catalog):
    return ScheduleEngine(catalog)


@pytest.fixture
def mmr_catalog():
    return VaccineCatalog([
        make_record(
            id="mmr",
            name="MMR",
            synonyms=["Measles Mumps Rubella"],
            vaccine_type="live-attenuated",
            target_age_groups=["9m"],
            schedule=[{"dose_number": 1, "timing": {"kind": "from_birth", "days": 274, "label": "9 months"}}],
            diseases_prevented=["Measles", "Mumps", "Rubella"],
            contraindications=["Pregnancy", "Severe immunodeficiency"],
        )
    ])


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def verifier(clock):
    return FakeVerifier(clock)


@pytest.fixture
def cache(catalog, verifier, clock):
    return VerificationCache(catalog, verifier, clock=clock, timeout=0.05)
