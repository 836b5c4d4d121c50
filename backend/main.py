from fastapi import FastAPI, HTTPException, BackgroundTasks, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from typing import List, Optional
from datetime import datetime
from urllib.parse import quote
import logging
import re

from backend.export_service import CampaignExportService, build_export_service
from backend.schemas import GenerationRequest, PreviewRequest, TargetingConfigIn
from campaign_export.config import load_config_from_env
from campaign_export.errors import (
    ArtifactNotReady,
    DirectoryError,
    InputError,
    JobNotFound,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Campaign Export - Location Ad Generation", version="1.0.0")


@app.on_event("startup")
async def create_export_service():
    """Build the export service once per process."""
    if getattr(app.state, "export_service", None) is not None:
        return

    config = load_config_from_env()
    logging.basicConfig(
        level=config.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app.state.export_service = build_export_service(config)


@app.on_event("shutdown")
async def cleanup_unfinished_jobs():
    """Mark jobs still processing as failed; their artifacts would be lost anyway."""
    service = getattr(app.state, "export_service", None)
    if service is None:
        return

    try:
        count = service.cleanup_unfinished_jobs()
        if count > 0:
            logger.info(f"Cleaned up {count} unfinished jobs")
    except Exception as e:
        logger.error(f"Error cleaning up unfinished jobs: {e}")


# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict this in production
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_export_service(request: Request) -> CampaignExportService:
    service = getattr(request.app.state, "export_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Export service not initialized")
    return service


def content_disposition(file_name: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 name (RFC 6266)."""
    fallback = re.sub(r"[^A-Za-z0-9._-]+", "_", file_name).strip("_")
    if not re.match(r"[A-Za-z0-9]", fallback):
        fallback = "export.csv"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"


def to_http_exception(e: Exception) -> HTTPException:
    """Map engine errors to HTTP status codes."""
    if isinstance(e, InputError):
        return HTTPException(status_code=400, detail={"message": str(e), "problems": e.problems})
    if isinstance(e, JobNotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ArtifactNotReady):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, DirectoryError):
        return HTTPException(status_code=503, detail=str(e))

    logger.error(f"Unhandled error: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


@app.get("/")
def read_root():
    return {
        "status": "running",
        "project": "campaign_export",
        "description": "Location campaign bulk-import generator",
        "timestamp": datetime.now().isoformat()
    }


@app.get("/api/health")
def health_check():
    return {"status": "healthy", "service": "campaign_export"}


# Locations

@app.get("/api/locations")
def list_locations(
    search: Optional[str] = None,
    state: Optional[List[str]] = Query(None),
    city: Optional[List[str]] = Query(None),
    zip_code: Optional[List[str]] = Query(None),
    service: CampaignExportService = Depends(get_export_service),
):
    """Search locations by name/city and filter by state, city or zip."""
    try:
        locations = service.search_locations(search, state, city, zip_code)
        return {"locations": locations, "total": len(locations)}

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/locations/states")
def list_states(service: CampaignExportService = Depends(get_export_service)):
    try:
        return {"states": service.get_states()}

    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/locations/cities")
def list_cities(
    state: Optional[str] = None,
    service: CampaignExportService = Depends(get_export_service),
):
    try:
        return {"cities": service.get_cities(state)}

    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/locations/{location_id}/config")
def get_location_config(location_id: str, service: CampaignExportService = Depends(get_export_service)):
    """Get the targeting config of a location."""
    try:
        if service.get_location(location_id) is None:
            raise HTTPException(status_code=404, detail="Location not found")

        config = service.get_targeting_config(location_id)
        if config is None:
            raise HTTPException(status_code=404, detail="No targeting config for this location")

        return config

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@app.put("/api/locations/{location_id}/config")
def save_location_config(
    location_id: str,
    body: TargetingConfigIn,
    service: CampaignExportService = Depends(get_export_service),
):
    """Create or replace the targeting config of a location."""
    try:
        if service.get_location(location_id) is None:
            raise HTTPException(status_code=404, detail="Location not found")

        return service.save_targeting_config(body.to_model(location_id))

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@app.delete("/api/locations/{location_id}/config")
def delete_location_config(location_id: str, service: CampaignExportService = Depends(get_export_service)):
    try:
        if not service.delete_targeting_config(location_id):
            raise HTTPException(status_code=404, detail="No targeting config for this location")

        return {"status": "deleted", "location_id": location_id}

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


# Generation

@app.post("/api/generation", status_code=202)
async def submit_generation(
    body: GenerationRequest,
    background_tasks: BackgroundTasks,
    service: CampaignExportService = Depends(get_export_service),
):
    """Create a generation job and process it in the background."""
    try:
        job = service.submit_generation(
            body.location_ids,
            body.variants(),
            body.campaign_model(),
            file_name_hint=body.file_name,
        )

        background_tasks.add_task(service.process_job, job["id"])

        return job

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@app.post("/api/generation/preview")
def preview_generation(body: PreviewRequest, service: CampaignExportService = Depends(get_export_service)):
    """First records of the export, without creating a job."""
    try:
        records = service.preview(body.location_ids, body.variants(), body.campaign_model(), body.limit)
        return {"records": records, "count": len(records)}

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/generation/jobs")
def list_jobs(limit: int = 20, service: CampaignExportService = Depends(get_export_service)):
    """List jobs, newest first."""
    try:
        return {"jobs": service.list_jobs(limit)}

    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/generation/stats")
def generation_stats(service: CampaignExportService = Depends(get_export_service)):
    try:
        return service.stats()

    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/generation/jobs/{job_id}")
def get_job_status(job_id: str, service: CampaignExportService = Depends(get_export_service)):
    """Poll a job."""
    try:
        return service.get_generation_status(job_id)

    except Exception as e:
        raise to_http_exception(e)


@app.get("/api/generation/jobs/{job_id}/download")
def download_job(job_id: str, service: CampaignExportService = Depends(get_export_service)):
    """Download the generated CSV of a completed job."""
    try:
        file_name, content = service.download_artifact(job_id)

        return StreamingResponse(
            iter([content]),
            media_type="text/csv; charset=utf-8",
            headers={
                "Content-Disposition": content_disposition(file_name)
            }
        )

    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@app.post("/api/generation/jobs/{job_id}/cancel")
def cancel_job(job_id: str, service: CampaignExportService = Depends(get_export_service)):
    try:
        return service.cancel_job(job_id)

    except Exception as e:
        raise to_http_exception(e)


@app.delete("/api/generation/jobs/{job_id}")
def delete_job(job_id: str, service: CampaignExportService = Depends(get_export_service)):
    """Delete a finished job and its cached file."""
    try:
        service.delete_job(job_id)
        return {"status": "deleted", "job_id": job_id}

    except Exception as e:
        raise to_http_exception(e)
