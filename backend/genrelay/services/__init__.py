"""Services layer for genrelay."""

from genrelay.services.generation_service import GenerationService
from genrelay.services.orchestrator import (
    AttemptOutcome,
    FallbackOrchestrator,
    OrchestrationResult,
    OutcomeKind,
)

__all__ = [
    "AttemptOutcome",
    "FallbackOrchestrator",
    "GenerationService",
    "OrchestrationResult",
    "OutcomeKind",
]
