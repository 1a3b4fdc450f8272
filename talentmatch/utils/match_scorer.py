"""
Candidate Matcher - deterministic ticket/profiler scoring.

For one ticket and a pool of profilers, computes five sub-scores per
candidate, combines them into a weighted composite, filters, sorts and
truncates:

    skills_match          required skills count double, preferred single
    experience_match      candidate years vs. years implied by the ticket
    location_match        exact / remote -> 1.0, same city 0.8, same country 0.6
    availability_match    available 1.0, busy or unknown 0.5, unavailable 0.0
    budget_compatibility  1.0 within budget, linear decay above the ceiling

Every sub-score function is total: missing data maps to a documented
neutral value, never to an exception. The Matcher has no side effects and
keeps no state between calls, so it is safe to share across requests.
"""
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from talentmatch.domain.constants import (
    HOURS_PER_DAY,
    PROFILER_PUBLIC_FIELDS,
    REMOTE_LOCATION_KEYWORDS,
    AvailabilityStatus,
    RateType,
    WorkArrangement,
)
from talentmatch.domain.errors import InvalidMatchOptionsError, MalformedRecordError
from talentmatch.utils.profile_normalizer import (
    CandidateProfile,
    Ticket,
    skill_key,
    years_for_label,
)

logger = logging.getLogger(__name__)

PlacementIndex = Mapping[Tuple[str, str], Dict[str, Any]]


# ===================== CONFIGURATION =====================

@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the five sub-scores in the composite match score."""
    skills: float = 0.35
    experience: float = 0.20
    location: float = 0.15
    availability: float = 0.20
    budget: float = 0.10

    @property
    def total(self) -> float:
        return self.skills + self.experience + self.location + self.availability + self.budget

    def validate(self) -> "ScoringWeights":
        values = asdict(self)
        negative = [name for name, value in values.items() if value < 0]
        if negative:
            raise ValueError(f"Scoring weights must be non-negative: {', '.join(negative)}")
        if self.total <= 0:
            raise ValueError("Scoring weights must sum to a positive value")
        return self

    @classmethod
    def from_settings(cls, settings) -> "ScoringWeights":
        return cls(
            skills=settings.MATCH_WEIGHT_SKILLS,
            experience=settings.MATCH_WEIGHT_EXPERIENCE,
            location=settings.MATCH_WEIGHT_LOCATION,
            availability=settings.MATCH_WEIGHT_AVAILABILITY,
            budget=settings.MATCH_WEIGHT_BUDGET,
        ).validate()


@dataclass(frozen=True)
class ScoringConfig:
    """Fixed constants behind the sub-score functions."""
    neutral_score: float = 0.5

    required_skill_weight: float = 2.0
    preferred_skill_weight: float = 1.0

    availability_scores: Tuple[Tuple[AvailabilityStatus, float], ...] = (
        (AvailabilityStatus.AVAILABLE, 1.0),
        (AvailabilityStatus.BUSY, 0.5),
        (AvailabilityStatus.UNAVAILABLE, 0.0),
    )

    same_city_score: float = 0.8
    same_country_score: float = 0.6

    budget_decay: float = 2.0
    budget_compatible_threshold: float = 0.5
    hours_per_day: float = HOURS_PER_DAY

    def availability_score(self, status: Optional[AvailabilityStatus]) -> float:
        scores = dict(self.availability_scores)
        if status is None:
            return scores[AvailabilityStatus.BUSY]
        return scores[status]


DEFAULT_WEIGHTS = ScoringWeights()
DEFAULT_CONFIG = ScoringConfig()


@dataclass
class MatchOptions:
    """Caller-controlled filters, validated before scoring starts."""
    availability_only: bool = False
    min_match_score: float = 0.0
    limit: Optional[int] = None

    def validate(self) -> "MatchOptions":
        if not isinstance(self.availability_only, bool):
            raise InvalidMatchOptionsError("availability_only must be a boolean")

        score = self.min_match_score
        if isinstance(score, bool) or not isinstance(score, (int, float)) or math.isnan(score):
            raise InvalidMatchOptionsError("min_match_score must be a number")
        if not 0.0 <= score <= 1.0:
            raise InvalidMatchOptionsError(f"min_match_score must be within [0, 1], got {score}")

        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int):
                raise InvalidMatchOptionsError("limit must be an integer")
            if self.limit < 0:
                raise InvalidMatchOptionsError(f"limit must be >= 0, got {self.limit}")
        return self


# ===================== RESULTS =====================

@dataclass(frozen=True)
class MatchDetails:
    skills_match: float
    experience_match: float
    location_match: float
    availability_match: float
    budget_compatibility: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MatchResult:
    candidate: CandidateProfile
    match_score: float
    match_details: MatchDetails
    budget_compatible: bool
    existing_placement: Optional[Dict[str, Any]] = None

    @property
    def candidate_id(self) -> str:
        return self.candidate.id

    def sort_key(self) -> Tuple[float, bool, str]:
        # Highest score first, fresh candidates before already-placed ones, then id
        return (-self.match_score, self.existing_placement is not None, self.candidate_id)

    def to_dict(self) -> Dict[str, Any]:
        """Profile fields merged with the scoring output."""
        record = self.candidate.record
        data = {f: record[f] for f in PROFILER_PUBLIC_FIELDS if f in record}
        data.update({
            "id": self.candidate_id,
            "match_score": self.match_score,
            "match_details": self.match_details.to_dict(),
            "budget_compatible": self.budget_compatible,
            "existing_placement": self.existing_placement,
        })
        return data


@dataclass(frozen=True)
class SkippedCandidate:
    id: Optional[str]
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "reason": self.reason}


@dataclass
class MatchOutcome:
    results: List[MatchResult] = field(default_factory=list)
    skipped: List[SkippedCandidate] = field(default_factory=list)
    total_matches: int = 0          # results passing filters, before the limit


# ===================== SUB-SCORES =====================

def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def score_skills(ticket: Ticket, candidate: CandidateProfile, config: ScoringConfig = DEFAULT_CONFIG) -> float:
    required = {skill_key(s) for s in ticket.required_skills} - {""}
    preferred = {skill_key(s) for s in ticket.preferred_skills} - {""} - required

    if not required and not preferred:
        return config.neutral_score

    have = candidate.skill_keys
    total = config.required_skill_weight * len(required) + config.preferred_skill_weight * len(preferred)
    matched = (
        config.required_skill_weight * len(required & have)
        + config.preferred_skill_weight * len(preferred & have)
    )
    if total <= 0:
        return config.neutral_score
    return _clamp(matched / total)


def score_experience(ticket: Ticket, candidate: CandidateProfile, config: ScoringConfig = DEFAULT_CONFIG) -> float:
    required = ticket.min_years_experience
    if required is None:
        required = years_for_label(ticket.seniority)
    if required is None:
        return config.neutral_score

    years = candidate.years_of_experience
    if years is None:
        years = years_for_label(candidate.experience_level)
    if years is None:
        return config.neutral_score

    if required <= 0:
        return 1.0
    return _clamp(years / required)


def _location_parts(value: str) -> List[str]:
    return [" ".join(part.split()) for part in value.casefold().split(",") if part.strip()]


def _is_remote(parts: Sequence[str]) -> bool:
    return any(part in REMOTE_LOCATION_KEYWORDS for part in parts)


def score_location(ticket: Ticket, candidate: CandidateProfile, config: ScoringConfig = DEFAULT_CONFIG) -> float:
    if ticket.work_arrangement == WorkArrangement.REMOTE.value:
        return 1.0

    ticket_parts = _location_parts(ticket.location or "")
    candidate_parts = _location_parts(candidate.location or "")

    if _is_remote(ticket_parts) or _is_remote(candidate_parts):
        return 1.0
    if not ticket_parts or not candidate_parts:
        return config.neutral_score
    if ticket_parts == candidate_parts:
        return 1.0

    same_country = ticket_parts[-1] == candidate_parts[-1]
    city_only = len(ticket_parts) == 1 or len(candidate_parts) == 1

    # "Paris" vs "Paris, France": same city, one side less specific.
    # "Paris, France" vs "Paris, USA" is not the same city.
    if ticket_parts[0] == candidate_parts[0] and (same_country or city_only):
        return config.same_city_score

    # "France" vs "Lyon, France", or two cities in the same country
    if same_country:
        return config.same_country_score

    return 0.0


def score_availability(candidate: CandidateProfile, config: ScoringConfig = DEFAULT_CONFIG) -> float:
    return config.availability_score(candidate.availability)


def _candidate_rate(ticket: Ticket, candidate: CandidateProfile, config: ScoringConfig) -> Optional[float]:
    """Candidate rate expressed in the ticket's rate unit."""
    if ticket.rate_type == RateType.DAILY:
        if candidate.daily_rate is not None:
            return candidate.daily_rate
        if candidate.hourly_rate is not None:
            return candidate.hourly_rate * config.hours_per_day
        return None

    if candidate.hourly_rate is not None:
        return candidate.hourly_rate
    if candidate.daily_rate is not None:
        return candidate.daily_rate / config.hours_per_day
    return None


def score_budget(
    ticket: Ticket,
    candidate: CandidateProfile,
    config: ScoringConfig = DEFAULT_CONFIG
) -> Tuple[float, bool]:
    """
    Returns (budget_compatibility, budget_compatible).

    No rate, no budget ceiling, or a currency we cannot compare all mean the
    candidate cannot be proven incompatible: neutral score, compatible.
    """
    rate = _candidate_rate(ticket, candidate, config)
    ceiling = ticket.budget_max
    if rate is None or ceiling is None:
        return config.neutral_score, True
    if candidate.currency and ticket.currency and candidate.currency != ticket.currency:
        return config.neutral_score, True

    if rate <= ceiling:
        score = 1.0
    elif ceiling <= 0:
        score = 0.0
    else:
        overshoot = (rate - ceiling) / ceiling
        score = _clamp(1.0 - config.budget_decay * overshoot)

    return score, score >= config.budget_compatible_threshold


# ===================== MATCHER =====================

class Matcher:
    """
    Scores a candidate pool against a ticket.

    Usage:
        matcher = Matcher()
        outcome = matcher.match(ticket, profilers, MatchOptions(limit=10))
    """

    def __init__(
        self,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        config: ScoringConfig = DEFAULT_CONFIG
    ):
        self.weights = weights.validate()
        self.config = config

    def composite(self, details: MatchDetails) -> float:
        w = self.weights
        weighted = (
            w.skills * details.skills_match
            + w.experience * details.experience_match
            + w.location * details.location_match
            + w.availability * details.availability_match
            + w.budget * details.budget_compatibility
        )
        return round(_clamp(weighted / w.total), 4)

    def score(
        self,
        ticket: Ticket,
        candidate: CandidateProfile,
        placement_index: Optional[PlacementIndex] = None
    ) -> MatchResult:
        """Score a single, already-normalized candidate."""
        budget_score, budget_compatible = score_budget(ticket, candidate, self.config)
        details = MatchDetails(
            skills_match=round(score_skills(ticket, candidate, self.config), 4),
            experience_match=round(score_experience(ticket, candidate, self.config), 4),
            location_match=round(score_location(ticket, candidate, self.config), 4),
            availability_match=round(score_availability(candidate, self.config), 4),
            budget_compatibility=round(budget_score, 4),
        )

        existing = None
        if placement_index:
            existing = placement_index.get((ticket.id, candidate.id))

        return MatchResult(
            candidate=candidate,
            match_score=self.composite(details),
            match_details=details,
            budget_compatible=budget_compatible,
            existing_placement=existing,
        )

    def match(
        self,
        ticket: Union[Ticket, Mapping[str, Any]],
        candidates: Sequence[Union[CandidateProfile, Mapping[str, Any]]],
        options: Optional[MatchOptions] = None,
        placement_index: Optional[PlacementIndex] = None
    ) -> MatchOutcome:
        """
        Score, filter, sort and truncate a candidate pool.

        Args:
            ticket: Ticket or raw ticket document
            candidates: CandidateProfile objects or raw profiler documents
            options: Filters; validated before any scoring
            placement_index: {(ticket_id, profiler_id): placement} for active placements

        Returns:
            MatchOutcome with sorted results and skipped malformed records

        Raises:
            InvalidMatchOptionsError: options out of range
        """
        options = (options or MatchOptions()).validate()
        if not isinstance(ticket, Ticket):
            ticket = Ticket.from_record(ticket)

        outcome = MatchOutcome()
        for raw in candidates:
            try:
                candidate = raw if isinstance(raw, CandidateProfile) else CandidateProfile.from_record(raw)
            except MalformedRecordError as e:
                logger.warning(f"Skipping profiler {e.record_id}: {e.reason}")
                outcome.skipped.append(SkippedCandidate(id=e.record_id, reason=e.reason))
                continue

            if options.availability_only and candidate.availability is not AvailabilityStatus.AVAILABLE:
                continue

            result = self.score(ticket, candidate, placement_index)
            if result.match_score < options.min_match_score:
                continue
            outcome.results.append(result)

        outcome.results.sort(key=MatchResult.sort_key)
        outcome.total_matches = len(outcome.results)
        if options.limit is not None:
            outcome.results = outcome.results[:options.limit]

        logger.info(
            f"Matched ticket {ticket.id}: {outcome.total_matches} candidates passed, "
            f"{len(outcome.results)} returned, {len(outcome.skipped)} skipped"
        )
        return outcome


def match(
    ticket: Union[Ticket, Mapping[str, Any]],
    candidates: Sequence[Union[CandidateProfile, Mapping[str, Any]]],
    options: Optional[MatchOptions] = None,
    placement_index: Optional[PlacementIndex] = None
) -> MatchOutcome:
    """Run the Matcher with default weights."""
    return Matcher().match(ticket, candidates, options, placement_index)
