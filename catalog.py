import logging
from typing import Iterable, List, Optional

from models import VaccineRecord
from matching import Matcher, SubstringMatcher
from vaccine_data import VACCINES, CATALOG_VERSION

logger = logging.getLogger(__name__)


class VaccineCatalog:
    """
    Immutable set of vaccine reference records.

    Records keep insertion order so that every listing (and everything
    derived from it) is deterministic.
    """

    def __init__(self, records: Iterable, matcher: Optional[Matcher] = None, version: str = CATALOG_VERSION):
        self.version = version
        self.matcher = matcher or SubstringMatcher()
        self._records: List[VaccineRecord] = []
        self._by_id = {}

        for raw in records:
            record = raw if isinstance(raw, VaccineRecord) else VaccineRecord.model_validate(raw)
            if record.id in self._by_id:
                raise ValueError(f"Duplicate vaccine id in catalog: {record.id!r}")
            if record.verification_status != "needs_verification":
                # Only the verification cache may mark a record verified
                raise ValueError(f"Seed record {record.id!r} must not claim verification_status={record.verification_status!r}")
            self._records.append(record)
            self._by_id[record.id] = record

        logger.info("Vaccine catalog %s loaded with %d records", self.version, len(self._records))

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def get_all(self) -> List[VaccineRecord]:
        return list(self._records)

    def get_by_id(self, vaccine_id: str) -> Optional[VaccineRecord]:
        return self._by_id.get(vaccine_id)

    def search(self, query: str) -> List[VaccineRecord]:
        """
        Substring match against name, synonyms and diseases prevented. No ranking.
        A blank query matches every record.
        """
        if not isinstance(query, str):
            return []
        if not query.strip():
            return self.get_all()
        return [
            record for record in self._records
            if self.matcher.matches(record.name, query)
            or any(self.matcher.matches(s, query) for s in record.synonyms)
            or any(self.matcher.matches(d, query) for d in record.diseases_prevented)
        ]


def default_catalog(matcher: Optional[Matcher] = None) -> VaccineCatalog:
    return VaccineCatalog(VACCINES, matcher=matcher)
