from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime, date

VaccineType = Literal["live-attenuated", "inactivated", "viral-vector", "other"]
MandatoryStatus = Literal["mandatory", "recommended", "optional", "special_program"]
EvidenceLevel = Literal["high", "moderate", "low"]
VerificationStatus = Literal["verified", "needs_verification"]
UrgencyLevel = Literal["low", "medium", "high", "needs_review"]
ReminderType = Literal["medication", "appointment", "vaccination", "checkup"]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire. Both are accepted as input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Dose timing variants ---

class FromBirth(CamelModel):
    kind: Literal["from_birth"] = "from_birth"
    days: int = Field(ge=0)
    label: str


class FromPreviousDose(CamelModel):
    kind: Literal["from_previous_dose"] = "from_previous_dose"
    days: int = Field(ge=0)
    label: str


class AgeGroupWindow(CamelModel):
    kind: Literal["age_group"] = "age_group"
    group: str
    label: str


class AsDirected(CamelModel):
    # No computable offset; always needs review
    kind: Literal["as_directed"] = "as_directed"
    label: str


DoseTiming = Annotated[
    Union[FromBirth, FromPreviousDose, AgeGroupWindow, AsDirected],
    Field(discriminator="kind"),
]


# --- Catalog ---

class DoseSchedule(CamelModel):
    dose_number: int = Field(ge=1)
    timing: DoseTiming
    interval_from_previous: Optional[str] = None
    notes: Optional[str] = None


class VaccineSource(CamelModel):
    title: str
    url: str
    retrieved_date: date


class CostEstimate(CamelModel):
    public: str
    private: str


class VaccineRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    name: str
    synonyms: List[str] = Field(default_factory=list)
    vaccine_type: VaccineType
    target_age_groups: List[str]
    schedule: List[DoseSchedule] = Field(min_length=1)
    diseases_prevented: List[str] = Field(default_factory=list)
    indications: List[str] = Field(default_factory=list)
    benefits: str = ""
    common_side_effects: List[str] = Field(default_factory=list)
    contraindications: List[str] = Field(default_factory=list)
    mandatory_status: MandatoryStatus
    cost_estimate: CostEstimate
    evidence_level: EvidenceLevel
    confidence: float = Field(ge=0.0, le=1.0)
    verification_status: VerificationStatus = "needs_verification"
    sources: List[VaccineSource] = Field(default_factory=list)

    @field_validator("schedule")
    @classmethod
    def _doses_numbered_in_order(cls, schedule: List[DoseSchedule]) -> List[DoseSchedule]:
        numbers = [dose.dose_number for dose in schedule]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f"dose numbers must run 1..{len(numbers)} in order, got {numbers}")
        return schedule


# --- Schedule engine input / output ---

class UserVaccineHistory(CamelModel):
    vaccine_name: str
    date_given: date
    # Optional: marks a single dose of a series instead of the whole series
    dose_number: Optional[int] = Field(None, ge=1)


class PersonalizedVaccineReminder(CamelModel):
    vaccine_id: str
    name: str
    due_date: Optional[date] = None
    reason: str
    urgency_level: UrgencyLevel
    ui_reminder_text: str


class ScheduleRequest(CamelModel):
    # Raw values are validated by the schedule engine so bad input maps to a 400
    dob: str
    history: List[Dict[str, Any]] = Field(default_factory=list)
    conditions: List[str] = Field(default_factory=list)


# --- Verification ---

class VerificationResult(CamelModel):
    vaccine_id: str
    verified: bool
    sources: List[VaccineSource] = Field(default_factory=list)
    disagreement: Optional[str] = None
    last_verified_timestamp: datetime
    confidence: float = Field(ge=0.0, le=1.0)


class VerificationReport(CamelModel):
    total: int
    verified: int
    needs_verification: int
    average_confidence: float
    last_updated: datetime


class VerifyManyRequest(CamelModel):
    vaccine_ids: List[str]


# --- Record store documents ---

class ReminderCreate(BaseModel):
    title: str
    description: Optional[str] = None
    reminder_type: ReminderType
    scheduled_at: datetime
    is_completed: bool = False
    is_active: bool = True


class ReminderUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    is_completed: Optional[bool] = None
    is_active: Optional[bool] = None
