# =============================================================================
# Services Module
# =============================================================================
# Service wiring for the job and trace stores.
# =============================================================================

from app.services.job_service import get_job_manager

__all__ = [
    "get_job_manager",
]
