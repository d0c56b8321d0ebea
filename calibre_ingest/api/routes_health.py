from fastapi import APIRouter, Depends
from calibre_ingest.core.config import Settings, get_settings
from calibre_ingest.models.upload import HealthResponse

router = APIRouter(tags=["health"])

@router.get("/", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        allowed_file_types=settings.allowed_types,
        max_file_size_mb=settings.max_file_size_mb,
    )
