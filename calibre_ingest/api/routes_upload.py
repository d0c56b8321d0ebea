import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from calibre_ingest.core.config import Settings, get_settings
from calibre_ingest.models.upload import UploadResult
from calibre_ingest.utils.storage import (
    FileTooLarge,
    is_allowed_file_type,
    read_limited,
    safe_filename,
    write_unique,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

FILE_FIELD = "file"


@router.post("/upload", response_model=UploadResult, response_model_exclude_none=True)
async def upload(request: Request, settings: Settings = Depends(get_settings)):
    """Store the first ``file`` field of a multipart body in the upload directory.

    Disallowed extensions and oversized payloads are reported as
    ``success: false`` with status 200. A body without a ``file`` field, or one
    that cannot be parsed, is a 400; a failed write is a 500.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        logger.warning("Upload request with content type %r", content_type)
        raise HTTPException(status_code=400)

    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException) as exc:
        logger.warning("Malformed multipart body: %s", exc)
        raise HTTPException(status_code=400)

    try:
        field = next((v for k, v in form.multi_items() if k == FILE_FIELD), None)
        if field is None:
            logger.warning("Upload request without a '%s' field", FILE_FIELD)
            raise HTTPException(status_code=400)

        if isinstance(field, UploadFile):
            filename = safe_filename(field.filename)
        else:
            filename = "unknown"

        if not is_allowed_file_type(filename, settings.allowed_extensions):
            logger.warning("Rejected file with invalid extension: %s", filename)
            return UploadResult(
                success=False,
                message=f"File type not allowed. Allowed types: {settings.allowed_file_types}",
                allowed_types=settings.allowed_types,
            )

        # A text part has no filename, so only UploadFile fields get this far.
        try:
            data = await read_limited(field, settings.max_file_size_bytes)
        except FileTooLarge:
            logger.warning("Rejected file too large: %s", filename)
            return UploadResult(
                success=False,
                message=f"File too large. Maximum size is {settings.max_file_size_mb}MB.",
            )
        except OSError as exc:
            logger.warning("Failed to read upload %s: %s", filename, exc)
            raise HTTPException(status_code=400)

        try:
            stored = await run_in_threadpool(write_unique, settings.upload_dir, filename, data)
        except OSError:
            logger.exception("Failed to store %s in %s", filename, settings.upload_dir)
            raise HTTPException(status_code=500)

        logger.info("File uploaded: %s (%d bytes)", stored, len(data))
        return UploadResult(
            success=True,
            message="File uploaded successfully",
            filename=stored,
            size=len(data),
        )
    finally:
        await form.close()
