"""Application DTOs."""

from portfolio.application.dtos.initiative import FieldChangeResult, TriggeredRun

__all__ = ["FieldChangeResult", "TriggeredRun"]
