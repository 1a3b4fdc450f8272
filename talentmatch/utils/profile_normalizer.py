"""
Record normalization for matching.

Turns raw ticket and profiler documents (as stored in MongoDB or posted as
JSON) into immutable dataclasses the scorer can rely on:

- Skills arrive either as bare strings or as {"name", "level"} objects.
  They are parsed once into PlainSkill / LeveledSkill and exposed through a
  uniform NormalizedSkill view, so scoring never inspects raw types.
- Numbers arrive as ints, floats, numeric strings or garbage. Anything that
  is not a finite non-negative number becomes None.
- A profiler without an id or a skills list cannot be scored and raises
  MalformedRecordError; the Matcher turns that into a skip entry.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from talentmatch.domain.constants import (
    AVAILABILITY_ALIASES,
    DEFAULT_CURRENCY,
    SENIORITY_MIN_YEARS,
    AvailabilityStatus,
    RateType,
)
from talentmatch.domain.errors import MalformedRecordError


# ===================== SKILLS =====================

@dataclass(frozen=True)
class PlainSkill:
    """Skill given by name only."""
    name: str


@dataclass(frozen=True)
class LeveledSkill:
    """Skill with a self-declared proficiency level."""
    name: str
    level: str


Skill = Union[PlainSkill, LeveledSkill]


@dataclass(frozen=True)
class NormalizedSkill:
    key: str                 # case-folded, whitespace-collapsed name used for comparison
    name: str
    level: Optional[str] = None


def skill_key(name: str) -> str:
    """Comparison key for a skill name: trimmed, single-spaced, case-folded."""
    return " ".join(str(name).split()).casefold()


def parse_skill(raw: Any) -> Optional[Skill]:
    """
    Parse one raw skill entry.

    Returns None for entries that carry no usable name (blank strings,
    dicts without "name", numbers...).
    """
    if isinstance(raw, str):
        name = raw.strip()
        return PlainSkill(name) if name else None

    if isinstance(raw, Mapping):
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        level = raw.get("level")
        if level is None or str(level).strip() == "":
            return PlainSkill(name.strip())
        return LeveledSkill(name.strip(), str(level).strip())

    return None


def normalize_skill(skill: Skill) -> NormalizedSkill:
    level = skill.level if isinstance(skill, LeveledSkill) else None
    return NormalizedSkill(key=skill_key(skill.name), name=skill.name, level=level)


# ===================== SCALARS =====================

def to_number(value: Any) -> Optional[float]:
    """Coerce to a finite non-negative float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def label_key(label: Optional[str]) -> Optional[str]:
    """Normalize a free-form label: 'Mid-Level ' -> 'mid_level'."""
    if not label:
        return None
    key = "_".join(str(label).strip().casefold().replace("-", " ").split())
    return key or None


def normalize_availability(raw: Any) -> Optional[AvailabilityStatus]:
    """Map free-form availability to the canonical enum; None when unrecognized."""
    key = label_key(to_text(raw))
    if key is None:
        return None
    return AVAILABILITY_ALIASES.get(key)


def years_for_label(label: Optional[str]) -> Optional[float]:
    """
    Minimum years implied by a seniority label.

    Tries the whole label first ('mid_level'), then each word
    ('Senior Backend Engineer' -> 'senior').
    """
    key = label_key(label)
    if key is None:
        return None
    if key in SENIORITY_MIN_YEARS:
        return float(SENIORITY_MIN_YEARS[key])
    for token in key.split("_"):
        if token in SENIORITY_MIN_YEARS:
            return float(SENIORITY_MIN_YEARS[token])
    return None


def _string_list(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, Iterable):
        return ()
    items = []
    for item in value:
        if isinstance(item, Mapping):
            item = item.get("name")
        text = to_text(item)
        if text:
            items.append(text)
    return tuple(items)


def _record_id(record: Mapping[str, Any]) -> Optional[str]:
    for key in ("id", "profiler_id", "_id"):
        value = record.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


# ===================== TICKET =====================

@dataclass(frozen=True)
class Ticket:
    """Hiring request, read-only for the duration of a match."""
    id: str
    position_title: str = ""
    company_name: str = ""
    ticket_number: Optional[str] = None
    required_skills: Tuple[str, ...] = ()
    preferred_skills: Tuple[str, ...] = ()
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    currency: str = DEFAULT_CURRENCY
    rate_type: RateType = RateType.HOURLY
    location: Optional[str] = None
    work_arrangement: Optional[str] = None
    seniority: Optional[str] = None
    min_years_experience: Optional[float] = None
    start_date: Optional[str] = None
    project_description: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Ticket":
        ticket_id = _record_id(record)
        if ticket_id is None:
            raise MalformedRecordError(None, "ticket has no id")

        rate_key = label_key(to_text(record.get("rate_type")))
        rate_type = RateType.DAILY if rate_key == RateType.DAILY.value else RateType.HOURLY

        return cls(
            id=ticket_id,
            position_title=to_text(record.get("position_title")) or "",
            company_name=to_text(record.get("company_name") or record.get("client_company")) or "",
            ticket_number=to_text(record.get("ticket_number")),
            required_skills=_string_list(record.get("required_skills")),
            preferred_skills=_string_list(record.get("preferred_skills")),
            budget_min=to_number(record.get("budget_min")),
            budget_max=to_number(record.get("budget_max")),
            currency=(to_text(record.get("currency")) or DEFAULT_CURRENCY).upper(),
            rate_type=rate_type,
            location=to_text(record.get("work_location") or record.get("location")),
            work_arrangement=label_key(to_text(record.get("work_arrangement"))),
            seniority=to_text(record.get("seniority")),
            min_years_experience=to_number(record.get("min_years_experience")),
            start_date=to_text(record.get("start_date")),
            project_description=to_text(record.get("project_description")),
        )

    def to_summary(self) -> Dict[str, Any]:
        """Ticket fields echoed back in match responses."""
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "position_title": self.position_title,
            "company_name": self.company_name,
            "required_skills": list(self.required_skills),
            "preferred_skills": list(self.preferred_skills),
            "budget_min": self.budget_min,
            "budget_max": self.budget_max,
            "currency": self.currency,
            "rate_type": self.rate_type.value,
            "work_location": self.location,
            "work_arrangement": self.work_arrangement,
            "seniority": self.seniority,
            "start_date": self.start_date,
            "project_description": self.project_description,
        }


# ===================== CANDIDATE =====================

@dataclass(frozen=True)
class CandidateProfile:
    """Profiler record in the shape the scorer needs."""
    id: str
    skills: Tuple[Skill, ...]
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    availability_status: Optional[str] = None
    years_of_experience: Optional[float] = None
    experience_level: Optional[str] = None
    hourly_rate: Optional[float] = None
    daily_rate: Optional[float] = None
    currency: Optional[str] = None
    notice_period_days: Optional[float] = None
    preferred_work_arrangement: Tuple[str, ...] = ()
    record: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def availability(self) -> Optional[AvailabilityStatus]:
        return normalize_availability(self.availability_status)

    @property
    def normalized_skills(self) -> Tuple[NormalizedSkill, ...]:
        return tuple(normalize_skill(s) for s in self.skills)

    @property
    def skill_keys(self) -> frozenset:
        return frozenset(s.key for s in self.normalized_skills)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CandidateProfile":
        """
        Build from a raw profiler document.

        Raises:
            MalformedRecordError: id missing, or skills missing / not a list
        """
        if not isinstance(record, Mapping):
            raise MalformedRecordError(None, "record is not an object")

        candidate_id = _record_id(record)
        if candidate_id is None:
            raise MalformedRecordError(None, "missing id")

        raw_skills = record.get("skills")
        if raw_skills is None:
            raise MalformedRecordError(candidate_id, "missing skills list")
        if isinstance(raw_skills, (str, bytes, Mapping)) or not isinstance(raw_skills, Iterable):
            raise MalformedRecordError(candidate_id, "skills is not a list")

        skills = tuple(s for s in (parse_skill(raw) for raw in raw_skills) if s is not None)
        currency = to_text(record.get("currency"))

        return cls(
            id=candidate_id,
            skills=skills,
            email=to_text(record.get("email")),
            first_name=to_text(record.get("first_name")),
            last_name=to_text(record.get("last_name")),
            phone=to_text(record.get("phone")),
            location=to_text(record.get("location")),
            availability_status=to_text(record.get("availability_status")),
            years_of_experience=to_number(record.get("years_of_experience")),
            experience_level=to_text(record.get("experience_level")),
            hourly_rate=to_number(record.get("hourly_rate")),
            daily_rate=to_number(record.get("daily_rate")),
            currency=currency.upper() if currency else None,
            notice_period_days=to_number(record.get("notice_period_days")),
            preferred_work_arrangement=_string_list(record.get("preferred_work_arrangement")),
            record={k: v for k, v in record.items() if k != "_id"},
        )
