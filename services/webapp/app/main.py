# =============================================================================
# FastAPI Main Application
# =============================================================================
# Entry point for the job archive tooling webapp.
# =============================================================================

from fastapi import FastAPI

from app.routers import health, jobs

# Application instance
app = FastAPI(
    title="Data Hub Job Archive",
    description="Delete, export and import pipeline jobs and their traces without direct access to MongoDB.",
    version="0.1.0",
)

# Include routers
app.include_router(health.router)
app.include_router(jobs.router)
