# src/pulse/domains/documents/api.py
"""
SoW Upload API Route

Accepts a single PDF in the multipart field ``sow``, writes it to a
temporary file under the upload directory, parses it and returns the draft.
The temporary file is removed on every path.
"""

from pathlib import Path
from typing import Optional
import logging
import re
import time

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ...api.responses import APIException, ErrorCode
from ...core.container import container_from
from .constants import PDF_CONTENT_TYPE
from .parser import parse_sow_pdf

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


def _temp_name(filename: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", Path(filename).name) or "upload.pdf"
    return f"{int(time.time() * 1000)}-{safe}"


@router.post("/upload-sow")
async def upload_sow(request: Request, sow: Optional[UploadFile] = File(None)):
    """
    Parse an uploaded Statement of Work into a project draft.

    Errors:
    - 400 when no file is sent, it is not a PDF, or no project name is found
    - 413 when it exceeds the configured size limit
    - 500 when the PDF cannot be processed
    """
    uploads = container_from(request).config.uploads

    if sow is None or not sow.filename:
        raise APIException(ErrorCode.MISSING_REQUIRED_FIELD, "No file uploaded")

    if sow.content_type != PDF_CONTENT_TYPE:
        logger.info(f"Rejected upload {sow.filename} with content type {sow.content_type}")
        raise APIException(ErrorCode.UNSUPPORTED_FORMAT, "Only PDF files are allowed")

    content = await sow.read(uploads.max_bytes + 1)
    if len(content) > uploads.max_bytes:
        limit_mb = uploads.max_bytes / (1024 * 1024)
        raise APIException(ErrorCode.FILE_TOO_LARGE, f"File too large. Maximum size is {limit_mb:g}MB")

    upload_dir = Path(uploads.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    temp_path = upload_dir / _temp_name(sow.filename)

    try:
        temp_path.write_bytes(content)
        draft = await run_in_threadpool(parse_sow_pdf, temp_path)
    except Exception:
        logger.exception(f"Error processing PDF {sow.filename}")
        raise APIException(ErrorCode.INTERNAL_ERROR, "Failed to process PDF file")
    finally:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error deleting uploaded file {temp_path}: {e}")

    if not draft.project_name:
        raise APIException(ErrorCode.EXTRACTION_FAILED, "Could not extract project data from PDF")

    logger.info(f"Parsed SoW {sow.filename}: {draft.project_name} ({len(draft.milestones)} milestone(s))")
    return JSONResponse({"success": True, **draft.to_api()})
