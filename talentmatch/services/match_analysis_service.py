"""
Match Analysis Service

Adds a narrative commentary (reasoning, strengths, concerns, overall fit) to
already-scored match results using the OpenAI chat API.

The commentary is decoration only: it never changes scores, flags or order.
When OpenAI is not configured, fails after retries, or returns something
unparseable, a fallback commentary derived from the sub-scores is used.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from talentmatch.config import settings
from talentmatch.utils.match_scorer import MatchResult
from talentmatch.utils.openai_service import OpenAIService, get_openai_service
from talentmatch.utils.profile_normalizer import Ticket

logger = logging.getLogger(__name__)

SUB_SCORE_LABELS = {
    "skills_match": "skills",
    "experience_match": "experience",
    "location_match": "location",
    "availability_match": "availability",
    "budget_compatibility": "budget",
}

STRENGTH_THRESHOLD = 0.8
CONCERN_THRESHOLD = 0.4

ANALYSIS_SYSTEM_PROMPT = """You are an expert talent matching specialist for software engineering roles.
You receive a hiring ticket and candidates that have ALREADY been scored by a deterministic matcher.
Do not re-score them. Explain each score in plain language for a delivery manager.

Respond with a JSON object of the form:
{"analyses": [{"profiler_id": "...", "reasoning": "...", "overall_fit": "...",
               "strengths": ["..."], "concerns": ["..."]}]}"""


def overall_fit_label(score: float) -> str:
    if score >= 0.8:
        return "Excellent fit"
    if score >= 0.6:
        return "Good fit"
    if score >= 0.4:
        return "Partial fit"
    return "Poor fit"


def fallback_analysis(result: MatchResult, reason: str) -> Dict[str, Any]:
    """Commentary derived from the sub-scores alone."""
    details = result.match_details.to_dict()
    strengths = [
        f"Strong {SUB_SCORE_LABELS[name]} match"
        for name, value in details.items() if value >= STRENGTH_THRESHOLD
    ]
    concerns = [
        f"Weak {SUB_SCORE_LABELS[name]} match"
        for name, value in details.items() if value <= CONCERN_THRESHOLD
    ]
    return {
        "reasoning": f"{reason} - summary derived from match scores",
        "overall_fit": overall_fit_label(result.match_score),
        "strengths": strengths,
        "concerns": concerns,
        "source": "fallback",
    }


class MatchAnalysisService:
    """
    Usage:
        service = MatchAnalysisService()
        analyses = service.analyze(ticket, outcome.results)  # {profiler_id: {...}}
    """

    def __init__(self, openai_service: OpenAIService = None, max_bio_tokens: int = None):
        self.openai_service = openai_service
        self.max_bio_tokens = max_bio_tokens or settings.ANALYSIS_MAX_BIO_TOKENS

    def analyze(self, ticket: Ticket, results: List[MatchResult]) -> Dict[str, Dict[str, Any]]:
        if not results:
            return {}

        if self.openai_service is None:
            return {r.candidate_id: fallback_analysis(r, "AI analysis not configured") for r in results}

        try:
            response_text = self.openai_service.generate_text(
                prompt=self._build_prompt(ticket, results),
                system_message=ANALYSIS_SYSTEM_PROMPT,
                json_mode=True,
            )
            parsed = self._parse(response_text)
        except Exception as e:
            logger.warning(f"AI match analysis unavailable for ticket {ticket.id}: {e}")
            return {r.candidate_id: fallback_analysis(r, "AI analysis temporarily unavailable") for r in results}

        analyses = {}
        for result in results:
            entry = parsed.get(result.candidate_id)
            if entry is None:
                logger.warning(f"No AI analysis returned for profiler {result.candidate_id}")
                analyses[result.candidate_id] = fallback_analysis(result, "AI analysis missing for this profiler")
            else:
                analyses[result.candidate_id] = entry
        return analyses

    def _build_prompt(self, ticket: Ticket, results: List[MatchResult]) -> str:
        lines = [
            "TICKET:",
            f"Position: {ticket.position_title}",
            f"Company: {ticket.company_name}",
            f"Required Skills: {json.dumps(list(ticket.required_skills))}",
            f"Preferred Skills: {json.dumps(list(ticket.preferred_skills))}",
            f"Seniority: {ticket.seniority or 'not specified'}",
            f"Location: {ticket.location or 'not specified'} ({ticket.work_arrangement or 'any arrangement'})",
            f"Budget: {ticket.budget_min} - {ticket.budget_max} {ticket.currency} ({ticket.rate_type.value})",
        ]
        if ticket.project_description:
            lines.append(f"Project Description: {ticket.project_description}")

        lines.append("")
        lines.append("SCORED CANDIDATES:")
        for result in results:
            candidate = result.candidate
            bio = candidate.record.get("bio") or ""
            lines.append(json.dumps({
                "profiler_id": candidate.id,
                "name": " ".join(filter(None, [candidate.first_name, candidate.last_name])),
                "location": candidate.location,
                "experience_level": candidate.experience_level,
                "years_of_experience": candidate.years_of_experience,
                "skills": [s.name for s in candidate.skills],
                "availability": candidate.availability_status,
                "hourly_rate": candidate.hourly_rate,
                "daily_rate": candidate.daily_rate,
                "bio": self.openai_service.truncate_to_tokens(bio, self.max_bio_tokens),
                "match_score": result.match_score,
                "match_details": result.match_details.to_dict(),
                "budget_compatible": result.budget_compatible,
            }))
        return "\n".join(lines)

    @staticmethod
    def _parse(response_text: str) -> Dict[str, Dict[str, Any]]:
        """
        Parse {"analyses": [...]} into {profiler_id: analysis}.

        Raises:
            ValueError: response is not the expected JSON shape
        """
        data = json.loads(response_text)
        items = data.get("analyses") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ValueError("AI response has no 'analyses' array")

        parsed = {}
        for item in items:
            if not isinstance(item, dict) or not item.get("profiler_id"):
                continue
            parsed[str(item["profiler_id"])] = {
                "reasoning": str(item.get("reasoning", "")),
                "overall_fit": str(item.get("overall_fit", "")),
                "strengths": [str(s) for s in item.get("strengths") or []],
                "concerns": [str(c) for c in item.get("concerns") or []],
                "source": "ai",
            }
        return parsed


_match_analysis_service: Optional[MatchAnalysisService] = None

def get_match_analysis_service() -> MatchAnalysisService:
    global _match_analysis_service
    if _match_analysis_service is None:
        _match_analysis_service = MatchAnalysisService(openai_service=get_openai_service())
    return _match_analysis_service
