import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from catalog import VaccineCatalog
from matching import Matcher
from models import (
    AgeGroupWindow,
    DoseSchedule,
    FromBirth,
    FromPreviousDose,
    PersonalizedVaccineReminder,
    UserVaccineHistory,
    VaccineRecord,
)
from utils import AVERAGE_DAYS_PER_MONTH, age_in_months, days_between, parse_iso_date
from vaccine_data import AGE_GROUPS, CONDITION_ALIASES

logger = logging.getLogger(__name__)


class InvalidProfileError(ValueError):
    """Raised when the profile handed to the engine is structurally unusable."""


def classify_urgency(due_date: Optional[date], today: date) -> str:
    if due_date is None:
        return "needs_review"
    days_until_due = days_between(today, due_date)
    if days_until_due <= 7:
        # Overdue counts as high too
        return "high"
    if days_until_due <= 30:
        return "medium"
    return "low"


def reminder_text(record: VaccineRecord, due_date: Optional[date], today: date) -> str:
    prevents = f" Prevents {', '.join(record.diseases_prevented)}." if record.diseases_prevented else ""
    if due_date is None:
        return f"Needs review: {record.name}.{prevents} Check the timing with your healthcare provider."

    days_until_due = days_between(today, due_date)
    if days_until_due < 0:
        return f"Overdue: {record.name}.{prevents} Schedule immediately."
    if days_until_due == 0:
        return f"Due today: {record.name}.{prevents} Schedule now."
    unit = "day" if days_until_due == 1 else "days"
    return f"Due in {days_until_due} {unit}: {record.name}.{prevents} Schedule soon."


class ScheduleEngine:
    """
    Computes a personalized list of due vaccines from a date of birth,
    the user's vaccination history and their medical conditions.

    Pure over its inputs plus the immutable catalog: the same profile on the
    same day always produces the same list.
    """

    def __init__(self, catalog: VaccineCatalog, matcher: Optional[Matcher] = None,
                 age_groups: Optional[Dict] = None, condition_aliases: Optional[Dict] = None):
        self.catalog = catalog
        self.matcher = matcher or catalog.matcher
        self.age_groups = age_groups if age_groups is not None else AGE_GROUPS
        self.condition_aliases = condition_aliases if condition_aliases is not None else CONDITION_ALIASES

        for record in catalog:
            unknown = [g for g in record.target_age_groups if g not in self.age_groups]
            if unknown:
                logger.warning("Vaccine %s targets unknown age groups %s; they never match", record.id, unknown)

    def generate_schedule(self, dob, history=None, conditions=None, today: Optional[date] = None) -> List[PersonalizedVaccineReminder]:
        today = today or date.today()
        birth = self._parse_dob(dob, today)
        entries = self._parse_history(history or [])
        conditions = self._expand_conditions(conditions or [])
        age = age_in_months(birth, today)

        reminders = []
        for record in self.catalog:
            reminder = self._reminder_for(record, birth, age, entries, conditions, today)
            if reminder is not None:
                reminders.append(reminder)

        # Ascending due date, undated entries last in catalog order (sort is stable)
        reminders.sort(key=lambda r: (r.due_date is None, r.due_date or date.min))
        logger.info("Generated %d vaccine reminders from %d history entries", len(reminders), len(entries))
        return reminders

    # --- input validation ---

    def _parse_dob(self, dob, today: date) -> date:
        try:
            birth = parse_iso_date(dob, "dob")
        except ValueError as exc:
            raise InvalidProfileError(str(exc)) from exc
        if birth > today:
            raise InvalidProfileError(f"dob must not be in the future, got {birth.isoformat()}")
        return birth

    def _parse_history(self, history) -> List[UserVaccineHistory]:
        entries = []
        for i, raw in enumerate(history):
            if isinstance(raw, UserVaccineHistory):
                entries.append(raw)
                continue
            if not isinstance(raw, dict):
                raise InvalidProfileError(f"history[{i}] must be an object with vaccineName and dateGiven")

            try:
                given = parse_iso_date(raw.get("dateGiven", raw.get("date_given")), f"history[{i}].dateGiven")
            except ValueError as exc:
                raise InvalidProfileError(str(exc)) from exc

            name = raw.get("vaccineName", raw.get("vaccine_name"))
            if not isinstance(name, str):
                # Unreadable name can't match anything
                continue

            dose_number = raw.get("doseNumber", raw.get("dose_number"))
            if isinstance(dose_number, bool) or not isinstance(dose_number, int) or dose_number < 1:
                dose_number = None

            entries.append(UserVaccineHistory(vaccine_name=name, date_given=given, dose_number=dose_number))
        return entries

    def _expand_conditions(self, conditions) -> List[str]:
        if isinstance(conditions, str):
            conditions = [conditions]
        expanded = []
        for condition in conditions:
            if not isinstance(condition, str) or not condition.strip():
                continue
            expanded.append(condition)
            expanded.extend(self.condition_aliases.get(condition.strip().lower(), []))
        return expanded

    # --- per-record rules ---

    def _reminder_for(self, record, birth, age, entries, conditions, today) -> Optional[PersonalizedVaccineReminder]:
        matching = [h for h in entries if self._is_same_vaccine(record, h.vaccine_name)]
        # No dose number, or one past the end of the series, counts as the whole series
        if any(h.dose_number is None or h.dose_number > len(record.schedule) for h in matching):
            return None

        given = {}
        for h in matching:
            if h.dose_number not in given or h.date_given > given[h.dose_number]:
                given[h.dose_number] = h.date_given
        next_dose = next((d for d in record.schedule if d.dose_number not in given), None)
        if next_dose is None:
            return None

        if self._is_contraindicated(record, conditions):
            return None

        group = self._eligible_group(record, age)
        if group is None:
            return None

        due_date = self._due_date(next_dose, birth, given)
        urgency = classify_urgency(due_date, today)
        return PersonalizedVaccineReminder(
            vaccine_id=record.id,
            name=record.name,
            due_date=due_date,
            reason=self._reason(record, next_dose, group, due_date),
            urgency_level=urgency,
            ui_reminder_text=reminder_text(record, due_date, today),
        )

    def _is_same_vaccine(self, record: VaccineRecord, vaccine_name: str) -> bool:
        return self.matcher.matches(vaccine_name, record.name) or self.matcher.matches_any(vaccine_name, record.synonyms)

    def _is_contraindicated(self, record: VaccineRecord, conditions: List[str]) -> bool:
        return any(
            self.matcher.matches(contra, condition)
            for condition in conditions
            for contra in record.contraindications
        )

    def _eligible_group(self, record: VaccineRecord, age: int) -> Optional[str]:
        for tag in record.target_age_groups:
            window = self.age_groups.get(tag)
            if window and window[0] <= age <= window[1]:
                return tag
        return None

    def _due_date(self, dose: DoseSchedule, birth: date, given: Dict[int, date]) -> Optional[date]:
        timing = dose.timing
        if isinstance(timing, FromBirth):
            return birth + timedelta(days=timing.days)

        if isinstance(timing, AgeGroupWindow):
            window = self.age_groups.get(timing.group)
            if window is None:
                return None
            return birth + timedelta(days=round(window[0] * AVERAGE_DAYS_PER_MONTH))

        if isinstance(timing, FromPreviousDose):
            # Earlier doses are all recorded by the time this one is next
            previous_date = given.get(dose.dose_number - 1)
            if previous_date is None:
                return None
            return previous_date + timedelta(days=timing.days)

        return None

    @staticmethod
    def _reason(record: VaccineRecord, dose: DoseSchedule, group: str, due_date: Optional[date]) -> str:
        total = len(record.schedule)
        if due_date is None:
            return f"Dose {dose.dose_number} of {total} ({dose.timing.label}) for age group {group}; timing needs review"
        return f"Dose {dose.dose_number} of {total} ({dose.timing.label}) for age group {group}"
