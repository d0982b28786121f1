"""Question endpoint: multipart parsing, upload validation and dispatch.

Handles the optional image upload, its temp-file lifecycle and hands the
question to the broker service.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile, status

from shniro.api.uploads import stored_upload
from shniro.broker.router import ImageInput
from shniro.broker.service import BrokerService, get_broker_service
from shniro.models.schemas import DEFAULT_QUESTION, SolveResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["solve"])


def _normalize_question(prompt: str | None) -> str:
    """Strip the prompt, substituting the default question when blank."""
    question = (prompt or "").strip()
    return question or DEFAULT_QUESTION


def _validate_image_type(file: UploadFile) -> str:
    """Validate that the upload declares an image MIME type.

    Args:
        file: The uploaded file.

    Returns:
        The declared MIME type.

    Raises:
        HTTPException: 400 if the file is not an image.
    """
    mime_type = (file.content_type or "").lower()
    if not mime_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are accepted",
        )
    return mime_type


async def _read_and_validate_size(file: UploadFile, max_size: int) -> bytes:
    """Read file content and validate size.

    Raises:
        HTTPException: 400 if the file is empty, 413 if it exceeds max_size.
    """
    content = await file.read()

    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty image provided",
        )

    if len(content) > max_size:
        size_mb = len(content) / (1024 * 1024)
        limit_mb = max_size / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"Image size ({size_mb:.1f}MB) exceeds maximum allowed ({limit_mb:.0f}MB)",
        )

    return content


@router.post("/solve", response_model=SolveResponse)
async def solve(
    broker: Annotated[BrokerService, Depends(get_broker_service)],
    prompt: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
    session_id: Annotated[str | None, Form()] = None,
    x_session_id: Annotated[str | None, Header()] = None,
) -> SolveResponse:
    """Answer a question, optionally about an attached image.

    Args:
        broker: The broker service.
        prompt: The question text (defaults to a generic instruction).
        image: Optional image file (multipart/form-data).
        session_id: Optional session identifier form field.
        x_session_id: Optional session identifier header.

    Returns:
        SolveResponse with the answer.

    Raises:
        400: Upload is not an image or is empty.
        413: Image exceeds the size limit.
    """
    question = _normalize_question(prompt)
    session = session_id or x_session_id

    if image is None or not image.filename:
        answer = await broker.solve(question, session_id=session)
        return SolveResponse(answer=answer)

    mime_type = _validate_image_type(image)
    content = await _read_and_validate_size(image, broker.config.max_image_size)

    async with stored_upload(content, mime_type, broker.config.upload_dir) as asset:
        logger.info(f"Received image {image.filename} ({mime_type}, {len(content)} bytes)")
        payload = ImageInput(data=asset.read_bytes(), mime_type=asset.mime_type)
        answer = await broker.solve(question, image=payload, session_id=session)

    return SolveResponse(answer=answer)
