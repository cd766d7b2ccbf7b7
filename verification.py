import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Protocol
from urllib.parse import urlparse

import httpx

from catalog import VaccineCatalog
from models import VaccineRecord, VaccineSource, VerificationReport, VerificationResult
from vaccine_data import TRUSTED_SOURCES

logger = logging.getLogger(__name__)

CACHE_DURATION = timedelta(days=7)
LOOKUP_TIMEOUT_SECONDS = 5.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_trusted_url(url: str, trusted_domains: Iterable[str] = TRUSTED_SOURCES) -> bool:
    if not isinstance(url, str):
        return False
    try:
        hostname = urlparse(url).hostname
    except (TypeError, ValueError):
        return False
    if not hostname:
        return False
    return any(domain in hostname for domain in trusted_domains)


class SourceVerifier(Protocol):
    async def lookup(self, record: VaccineRecord) -> VerificationResult:
        ...


class TrustedSourceVerifier:
    """
    Checks a record against its own sources: every allowlisted source URL is
    probed over HTTP and the record counts as verified once one of them answers.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, trusted_domains: Iterable[str] = TRUSTED_SOURCES,
                 clock: Callable[[], datetime] = _utcnow):
        self.client = client
        self.trusted_domains = list(trusted_domains)
        self.clock = clock

    async def lookup(self, record: VaccineRecord) -> VerificationResult:
        trusted = [s for s in record.sources if is_trusted_url(s.url, self.trusted_domains)]
        untrusted = [s for s in record.sources if s not in trusted]
        now = self.clock()

        if self.client is None:
            async with httpx.AsyncClient(follow_redirects=True, timeout=LOOKUP_TIMEOUT_SECONDS) as client:
                answered = await self._probe_all(client, trusted)
        else:
            answered = await self._probe_all(self.client, trusted)

        reachable = [
            VaccineSource(title=s.title, url=s.url, retrieved_date=now.date())
            for s, ok in zip(trusted, answered) if ok
        ]
        confidence = record.confidence * len(reachable) / len(trusted) if trusted else 0.0

        disagreement = None
        if untrusted:
            hosts = sorted({urlparse(s.url).hostname or s.url for s in untrusted})
            disagreement = f"{len(untrusted)} source(s) outside the trusted allowlist: {', '.join(hosts)}"

        return VerificationResult(
            vaccine_id=record.id,
            verified=bool(reachable),
            sources=reachable,
            disagreement=disagreement,
            last_verified_timestamp=now,
            confidence=round(confidence, 4),
        )

    async def _probe_all(self, client: httpx.AsyncClient, sources: List[VaccineSource]) -> List[bool]:
        return list(await asyncio.gather(*(self._probe(client, s) for s in sources)))

    @staticmethod
    async def _probe(client: httpx.AsyncClient, source: VaccineSource) -> bool:
        try:
            response = await client.get(source.url)
        except httpx.HTTPError as e:
            logger.warning("Source %s unreachable: %s", source.url, e)
            return False
        return response.status_code < 400


class VerificationCache:
    """
    Best-effort freshness tracking for catalog entries.

    Entries expire after ``ttl`` and are looked up again on next access.
    Two concurrent verify() calls for the same expired id may both run the
    lookup; the last one to finish wins.
    """

    def __init__(self, catalog: VaccineCatalog, verifier: SourceVerifier, ttl: timedelta = CACHE_DURATION,
                 timeout: float = LOOKUP_TIMEOUT_SECONDS, clock: Callable[[], datetime] = _utcnow,
                 trusted_domains: Iterable[str] = TRUSTED_SOURCES):
        self.catalog = catalog
        self.verifier = verifier
        self.ttl = ttl
        self.timeout = timeout
        self.clock = clock
        self.trusted_domains = list(trusted_domains)
        self._cache: Dict[str, VerificationResult] = {}
        self._pending = set()

    def _is_fresh(self, result: VerificationResult) -> bool:
        return self.clock() - result.last_verified_timestamp < self.ttl

    async def verify(self, vaccine_id: str) -> VerificationResult:
        cached = self._cache.get(vaccine_id)
        if cached is not None and self._is_fresh(cached):
            logger.debug("Verification cache hit for %s", vaccine_id)
            return cached

        record = self.catalog.get_by_id(vaccine_id)
        if record is None:
            return self._unverified(vaccine_id, "unknown vaccine id")

        logger.debug("Verification cache miss for %s", vaccine_id)
        self._pending.add(vaccine_id)
        try:
            result = await asyncio.wait_for(self.verifier.lookup(record), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Verification lookup for %s timed out after %ss", vaccine_id, self.timeout)
            return self._unverified(vaccine_id, "verification lookup timed out")
        except Exception as e:
            logger.warning("Verification lookup for %s failed: %s", vaccine_id, e)
            return self._unverified(vaccine_id, "verification lookup failed")
        finally:
            self._pending.discard(vaccine_id)

        self._cache[vaccine_id] = result
        return result

    async def verify_all(self, vaccine_ids: Iterable[str]) -> List[VerificationResult]:
        return list(await asyncio.gather(*(self.verify(vaccine_id) for vaccine_id in vaccine_ids)))

    def needs_verification(self, vaccine_id: str) -> bool:
        cached = self._cache.get(vaccine_id)
        return cached is None or not self._is_fresh(cached)

    def status(self, vaccine_id: str) -> str:
        """absent, pending_verification, verified or needs_verification."""
        if vaccine_id in self._pending:
            return "pending_verification"
        cached = self._cache.get(vaccine_id)
        if cached is None:
            return "absent"
        if not self._is_fresh(cached):
            return "pending_verification"
        return "verified" if cached.verified else "needs_verification"

    def annotate(self, record: VaccineRecord) -> VaccineRecord:
        status = "verified" if self.status(record.id) == "verified" else "needs_verification"
        return record.model_copy(update={"verification_status": status})

    def validate_source(self, source) -> bool:
        """Accepts a VaccineSource, a source dict or a bare URL string."""
        if isinstance(source, VaccineSource):
            url = source.url
        elif isinstance(source, dict):
            url = source.get("url")
        else:
            url = source
        return is_trusted_url(url, self.trusted_domains)

    async def report(self, vaccines: Iterable[VaccineRecord]) -> VerificationReport:
        results = await self.verify_all([v.id for v in vaccines])
        total = len(results)
        verified = sum(1 for r in results if r.verified)
        average = sum(r.confidence for r in results) / total if total else 0.0
        return VerificationReport(
            total=total,
            verified=verified,
            needs_verification=total - verified,
            average_confidence=round(average, 4),
            last_updated=self.clock(),
        )

    def clear(self, vaccine_id: Optional[str] = None) -> None:
        if vaccine_id is None:
            self._cache.clear()
        else:
            self._cache.pop(vaccine_id, None)

    def stats(self) -> Dict[str, int]:
        total = len(self._cache)
        verified = sum(1 for r in self._cache.values() if r.verified)
        return {"total": total, "verified": verified, "needs_verification": total - verified}

    def _unverified(self, vaccine_id: str, reason: str) -> VerificationResult:
        return VerificationResult(
            vaccine_id=vaccine_id,
            verified=False,
            sources=[],
            disagreement=reason,
            last_verified_timestamp=self.clock(),
            confidence=0.0,
        )
