# =============================================================================
# Job Service - Job Manager Wiring
# =============================================================================
# Builds the JobManager used by the jobs router from webapp settings.
# =============================================================================

from typing import Optional

from hub_libs.job_manager import JobManager
from hub_libs.models import JobArchiveSettings
from hub_libs.mongo_store import build_job_manager

from app.config import get_settings

# Singleton instance
_job_manager: Optional[JobManager] = None


def get_job_manager() -> JobManager:
    """Get or create the JobManager singleton."""
    global _job_manager
    if _job_manager is None:
        settings = get_settings()
        _job_manager = build_job_manager(
            settings.mongo_connection_string,
            JobArchiveSettings(),
        )
    return _job_manager
