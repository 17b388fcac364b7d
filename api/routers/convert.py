"""Treatment conversion endpoints.

Accepts a treatment either as JSON or as ``multipart/form-data`` (a
``treatment`` text field or an uploaded ``file``), converts it into a
Final Draft document and returns a reference to the stored file.
"""

import json
import logging
from pathlib import PurePath

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from api.config import Settings
from api.dependencies import get_conversion_service, get_file_store, get_settings_dependency
from core.exceptions import ValidationException
from core.models import ConversionResponse, ConvertRequest
from services.conversion import ConversionService
from services.file_store import FileStore

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_UPLOAD_SUFFIXES = {".txt", ".text", ".md", ".fountain"}

# Allowance on top of the upload limit for title/author fields and part headers.
FORM_OVERHEAD_BYTES = 64 * 1024


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _resolve_request(
    request: Request, max_upload_bytes: int
) -> tuple[str, str | None, str | None]:
    """Inspect Content-Type and return ``(treatment, title, author)``.

    Supports:
    - ``application/json``: expects a ``ConvertRequest`` body
    - ``multipart/form-data`` / urlencoded forms: ``file`` or ``treatment``
      field plus optional ``title`` and ``author``
    """
    ct = (request.headers.get("content-type") or "").lower()

    if "multipart/form-data" in ct or "application/x-www-form-urlencoded" in ct:
        return await _resolve_form(request, max_upload_bytes)
    # Default: JSON body
    return await _resolve_json(request)


async def _resolve_json(request: Request) -> tuple[str, str | None, str | None]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationException(
            "Request body is not valid JSON",
            details={"error": str(exc)},
        ) from exc

    if not isinstance(body, dict):
        raise ValidationException("Request body must be a JSON object")

    try:
        req = ConvertRequest(**body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc
    return req.treatment, req.title, req.author


def _decode_upload(raw: bytes, filename: str) -> str:
    suffix = PurePath(filename).suffix.lower()
    if suffix not in ALLOWED_UPLOAD_SUFFIXES:
        raise ValidationException(
            "Unsupported file type. Allowed: " + ", ".join(sorted(ALLOWED_UPLOAD_SUFFIXES)),
            details={"filename": filename},
        )
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationException(
            "Uploaded file is not valid UTF-8 text",
            details={"filename": filename},
        ) from exc


async def _resolve_form(
    request: Request, max_upload_bytes: int
) -> tuple[str, str | None, str | None]:
    # Reject oversized bodies before the form is parsed and buffered.
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_upload_bytes + FORM_OVERHEAD_BYTES:
        raise ValidationException(
            f"File exceeds maximum size of {max_upload_bytes} bytes",
            details={"size": int(declared), "max_size": max_upload_bytes},
        )

    try:
        form = await request.form(max_part_size=max_upload_bytes)
    except HTTPException as exc:
        raise ValidationException(
            f"Form data rejected: {exc.detail}",
            details={"max_size": max_upload_bytes},
        ) from exc
    upload = form.get("file")
    treatment: str | None = None

    # Browsers send an empty part when no file was chosen.
    if upload is not None and hasattr(upload, "read") and getattr(upload, "filename", ""):
        raw = await upload.read()
        if len(raw) > max_upload_bytes:
            raise ValidationException(
                f"File exceeds maximum size of {max_upload_bytes} bytes",
                details={"size": len(raw), "max_size": max_upload_bytes},
            )
        if not raw:
            raise ValidationException("Uploaded file is empty")
        treatment = _decode_upload(raw, upload.filename)
        logger.info("Received treatment upload %s (%d bytes)", upload.filename, len(raw))
    else:
        text = form.get("treatment")
        if isinstance(text, str):
            treatment = text

    if not treatment or not treatment.strip():
        raise ValidationException(
            "Provide a treatment as text or upload a file",
            details={"field": "treatment"},
        )

    title = form.get("title")
    author = form.get("author")
    return (
        treatment,
        title if isinstance(title, str) else None,
        author if isinstance(author, str) else None,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/convert",
    response_model=ConversionResponse,
    status_code=status.HTTP_200_OK,
    summary="Convert a treatment into a Final Draft screenplay",
    description=(
        "Structures a prose treatment with the configured text generation service "
        "and stores the result as an .fdx file. Accepts JSON or multipart/form-data."
    ),
)
async def convert_treatment(
    request: Request,
    service: ConversionService = Depends(get_conversion_service),
    settings: Settings = Depends(get_settings_dependency),
) -> ConversionResponse:
    """Convert a treatment and return a reference to the generated file."""
    treatment, title, author = await _resolve_request(request, settings.max_upload_bytes)

    result = await service.convert(treatment, title, author)

    return ConversionResponse(
        filename=result.filename,
        download_url=str(request.app.url_path_for("download_file", filename=result.filename)),
        title=result.title_page.title,
        author=result.title_page.author,
        scene_count=len(result.screenplay.scenes),
        element_count=result.screenplay.element_count,
    )


@router.get(
    "/files/{filename}",
    name="download_file",
    response_class=FileResponse,
    summary="Download a generated screenplay",
)
async def download_file(
    filename: str,
    file_store: FileStore = Depends(get_file_store),
) -> FileResponse:
    """Return a previously generated .fdx file as an attachment."""
    path = file_store.path_for(filename)
    return FileResponse(path, media_type="application/xml", filename=filename)
