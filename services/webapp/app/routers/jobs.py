# =============================================================================
# Jobs Router
# =============================================================================
# Endpoints for deleting, exporting and importing pipeline jobs and their
# traces.
# =============================================================================

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from pydantic import BaseModel, Field
from pymongo.errors import PyMongoError

from hub_libs.errors import ArchiveError
from hub_libs.job_manager import JobManager
from hub_libs.models import JobDeleteResponse, JobImportResponse

from app.auth.dependencies import AuthenticatedUser, get_current_user
from app.services.job_service import get_job_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

ARCHIVE_FILENAME = "jobs-export.zip"


class ExportRequest(BaseModel):
    """Request for a job export. ``job_ids`` omitted or null exports every job."""

    job_ids: Optional[list[str]] = Field(None, description="Jobs to export")


def _store_unavailable(exc: PyMongoError) -> HTTPException:
    logger.error(f"Job store unavailable: {exc}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Job store unavailable: {exc}",
    )


@router.delete("", response_model=JobDeleteResponse)
def delete_jobs(
    ids: Optional[str] = Query(None, description="Comma-delimited job ids"),
    manager: JobManager = Depends(get_job_manager),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> JobDeleteResponse:
    """
    Delete jobs and every trace that references them.

    Ids that do not exist are counted in errorCount; the rest are still
    deleted. Omitting ``ids`` deletes nothing.
    """
    try:
        response = manager.delete_jobs(ids)
    except PyMongoError as exc:
        raise _store_unavailable(exc) from exc

    logger.info(f"{current_user.username} deleted jobs: {sorted(response.deleted_jobs)}")
    return response


@router.post("/export")
def export_jobs(
    request: Optional[ExportRequest] = None,
    manager: JobManager = Depends(get_job_manager),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> Response:
    """
    Download an archive of jobs and their traces.

    Returns 204 No Content when none of the selected jobs exist.
    """
    job_ids = request.job_ids if request is not None else None
    work_dir = Path(tempfile.mkdtemp(prefix="job-export-"))
    try:
        result = manager.export_jobs(work_dir / ARCHIVE_FILENAME, job_ids)
        if result.path is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        data = result.path.read_bytes()
    except PyMongoError as exc:
        raise _store_unavailable(exc) from exc
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    logger.info(
        f"{current_user.username} exported {result.job_count} job(s) "
        f"and {result.trace_count} trace(s)"
    )
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename={ARCHIVE_FILENAME}"},
    )


@router.post("/import", response_model=JobImportResponse)
def import_jobs(
    file: UploadFile = File(...),
    manager: JobManager = Depends(get_job_manager),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> JobImportResponse:
    """
    Restore jobs and traces from an uploaded archive.

    Existing documents with the same ids are overwritten. A file that is not
    a readable archive is rejected with 400.
    """
    with tempfile.NamedTemporaryFile(suffix=".zip") as upload:
        shutil.copyfileobj(file.file, upload)
        upload.flush()
        try:
            response = manager.import_jobs(upload.name)
        except ArchiveError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        except PyMongoError as exc:
            raise _store_unavailable(exc) from exc

    logger.info(
        f"{current_user.username} imported {len(response.imported_jobs)} job(s) "
        f"and {len(response.imported_traces)} trace(s)"
    )
    return response
