from pydantic import BaseModel
from typing import List, Optional


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Calibre Ingest Backend"
    allowed_file_types: List[str]
    max_file_size_mb: int


class UploadResult(BaseModel):
    success: bool
    message: str
    filename: Optional[str] = None
    size: Optional[int] = None
    allowed_types: Optional[List[str]] = None
