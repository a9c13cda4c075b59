"""Review pipeline."""

from reviewgate.review.orchestrator import ReviewOrchestrator, run_review

__all__ = ["ReviewOrchestrator", "run_review"]
