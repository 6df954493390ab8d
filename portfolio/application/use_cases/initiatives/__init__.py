"""Initiative use cases."""

from portfolio.application.use_cases.initiatives.initiative_operations import InitiativeService

__all__ = ["InitiativeService"]
