"""Protocol flows that combine the clock, signer and session services."""

from steamguard.pipeline.confirmation_orchestrator import ConfirmationOrchestrator

__all__ = ["ConfirmationOrchestrator"]
