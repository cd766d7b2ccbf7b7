from datetime import datetime, timedelta, timezone

import httpx
import pytest

from catalog import VaccineCatalog
from models import VaccineRecord, VaccineSource
from verification import TrustedSourceVerifier, VerificationCache, is_trusted_url

from conftest import FakeVerifier, make_record


async def test_verify_twice_within_window_returns_cached_object(cache, verifier, clock):
    first = await cache.verify("bcg")
    clock.advance(days=6, hours=23)
    second = await cache.verify("bcg")

    assert second is first
    assert verifier.calls == ["bcg"]


async def test_expired_entry_triggers_fresh_lookup(cache, verifier, clock):
    first = await cache.verify("bcg")
    clock.advance(days=7)
    second = await cache.verify("bcg")

    assert second is not first
    assert second.last_verified_timestamp == clock()
    assert verifier.calls == ["bcg", "bcg"]


async def test_needs_verification_follows_the_cache(cache, clock):
    assert cache.needs_verification("hepb")
    await cache.verify("hepb")
    assert not cache.needs_verification("hepb")
    clock.advance(days=8)
    assert cache.needs_verification("hepb")


async def test_status_state_machine(catalog, clock):
    verifier = FakeVerifier(clock, unverified={"influenza"})
    cache = VerificationCache(catalog, verifier, clock=clock)

    assert cache.status("bcg") == "absent"
    await cache.verify("bcg")
    await cache.verify("influenza")
    assert cache.status("bcg") == "verified"
    assert cache.status("influenza") == "needs_verification"

    clock.advance(days=7, seconds=1)
    assert cache.status("bcg") == "pending_verification"


async def test_failed_lookup_degrades_and_is_not_cached(catalog, clock):
    verifier = FakeVerifier(clock, failing={"dpt"})
    cache = VerificationCache(catalog, verifier, clock=clock)

    result = await cache.verify("dpt")
    assert result.verified is False
    assert result.confidence == 0.0
    assert result.disagreement == "verification lookup failed"
    assert cache.needs_verification("dpt")

    await cache.verify("dpt")
    assert verifier.calls == ["dpt", "dpt"]


async def test_slow_lookup_times_out(catalog, clock):
    verifier = FakeVerifier(clock, slow={"covid19"})
    cache = VerificationCache(catalog, verifier, clock=clock, timeout=0.01)

    result = await cache.verify("covid19")
    assert result.verified is False
    assert result.disagreement == "verification lookup timed out"
    assert cache.status("covid19") == "absent"


async def test_unknown_id_is_not_an_error(cache, verifier):
    result = await cache.verify("smallpox")
    assert result.verified is False
    assert result.vaccine_id == "smallpox"
    assert verifier.calls == []


async def test_verify_all_isolates_failures_and_keeps_order(catalog, clock):
    verifier = FakeVerifier(clock, failing={"opv"})
    cache = VerificationCache(catalog, verifier, clock=clock)

    results = await cache.verify_all(["bcg", "opv", "hepb"])
    assert [r.vaccine_id for r in results] == ["bcg", "opv", "hepb"]
    assert [r.verified for r in results] == [True, False, True]


async def test_report_summarises_results(catalog, clock):
    verifier = FakeVerifier(clock, unverified={"hpv"}, failing={"influenza"})
    cache = VerificationCache(catalog, verifier, clock=clock)
    vaccines = [catalog.get_by_id(i) for i in ("bcg", "hpv", "influenza")]

    report = await cache.report(vaccines)
    assert report.total == 3
    assert report.verified == 1
    assert report.needs_verification == 2
    assert report.average_confidence == pytest.approx((0.95 + 0.5 + 0.0) / 3, abs=1e-4)
    assert report.last_updated == clock()


async def test_report_over_nothing(cache):
    report = await cache.report([])
    assert (report.total, report.verified, report.average_confidence) == (0, 0, 0.0)


async def test_annotate_copies_status_onto_record(cache, catalog):
    bcg = catalog.get_by_id("bcg")
    assert cache.annotate(bcg).verification_status == "needs_verification"

    await cache.verify("bcg")
    assert cache.annotate(bcg).verification_status == "verified"
    assert catalog.get_by_id("bcg").verification_status == "needs_verification"


async def test_clear_and_stats(catalog, clock):
    cache = VerificationCache(catalog, FakeVerifier(clock, unverified={"td"}), clock=clock)
    await cache.verify_all(["bcg", "hepb", "td"])
    assert cache.stats() == {"total": 3, "verified": 2, "needs_verification": 1}

    cache.clear("bcg")
    assert cache.stats()["total"] == 2
    assert cache.needs_verification("bcg")

    cache.clear()
    assert cache.stats() == {"total": 0, "verified": 0, "needs_verification": 0}


@pytest.mark.parametrize("url,trusted", [
    ("https://www.who.int/immunization", True),
    ("https://main.mohfw.gov.in", True),
    ("http://nhm.gov.in/index.php", True),
    ("https://iapindia.org/immunisation-schedule", False),
    ("https://who.int.example.com/fake", True),
    ("not a url", False),
    ("", False),
])
def test_validate_source(cache, url, trusted):
    source = VaccineSource(title="t", url=url, retrieved_date="2025-01-01")
    assert cache.validate_source(source) is trusted


def test_validate_source_accepts_plain_dicts(cache):
    assert cache.validate_source({"title": "WHO", "url": "https://www.who.int"})
    assert not cache.validate_source({"title": "no url"})
    assert not is_trusted_url(None)


def test_validate_source_accepts_bare_urls(cache):
    assert cache.validate_source("https://www.who.int")
    assert not cache.validate_source("https://iapindia.org")
    assert not cache.validate_source(None)
    assert not cache.validate_source(42)


# --- TrustedSourceVerifier over a mocked transport ---

def _record(**overrides):
    return VaccineRecord.model_validate(make_record(**overrides))


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_trusted_verifier_marks_reachable_sources(clock):
    def handler(request):
        if request.url.host == "www.who.int":
            return httpx.Response(200)
        return httpx.Response(503)

    record = _record(id="hpv", confidence=0.9, sources=[
        {"title": "WHO", "url": "https://www.who.int/x", "retrieved_date": "2025-01-15"},
        {"title": "MoHFW", "url": "https://main.mohfw.gov.in", "retrieved_date": "2025-01-15"},
        {"title": "IAP", "url": "https://iapindia.org/schedule", "retrieved_date": "2025-01-15"},
    ])
    async with _client(handler) as client:
        result = await TrustedSourceVerifier(client, clock=clock).lookup(record)

    assert result.verified is True
    assert [s.url for s in result.sources] == ["https://www.who.int/x"]
    assert result.sources[0].retrieved_date == clock().date()
    assert result.confidence == pytest.approx(0.45)
    assert "iapindia.org" in result.disagreement


async def test_trusted_verifier_with_nothing_reachable(clock):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    async with _client(handler) as client:
        result = await TrustedSourceVerifier(client, clock=clock).lookup(_record())

    assert result.verified is False
    assert result.sources == []
    assert result.confidence == 0.0
    assert result.disagreement is None


async def test_trusted_verifier_ignores_untrusted_sources(clock):
    calls = []

    def handler(request):
        calls.append(str(request.url))
        return httpx.Response(200)

    record = _record(sources=[{"title": "Blog", "url": "https://vaccines.example.com", "retrieved_date": "2025-01-15"}])
    async with _client(handler) as client:
        result = await TrustedSourceVerifier(client, clock=clock).lookup(record)

    assert calls == []
    assert result.verified is False
    assert result.disagreement.startswith("1 source(s) outside the trusted allowlist")


async def test_cache_with_trusted_verifier(clock):
    catalog = VaccineCatalog([make_record(id="typhoid")])

    async with _client(lambda request: httpx.Response(200)) as client:
        cache = VerificationCache(catalog, TrustedSourceVerifier(client, clock=clock), clock=clock)
        result = await cache.verify("typhoid")

    assert result.verified is True
    assert cache.status("typhoid") == "verified"
    assert result.last_verified_timestamp == datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_default_ttl_is_seven_days(cache):
    assert cache.ttl == timedelta(days=7)
