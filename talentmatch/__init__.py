"""TalentMatch staffing backend: tickets, profilers, matching and placements."""

__version__ = "1.0.0"
