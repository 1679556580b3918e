# face_reading/routers/face_reading_router.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from face_reading.core.errors import FaceReadingError
from face_reading.schemas.face_reading_schema import ErrorResponse, FaceReadingRequest, FaceReadingResponse
from face_reading.services.face_reading_service import (
    FaceReadingService,
    client_key_from_headers,
    get_face_reading_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/face-reading", tags=["face-reading"])

UNEXPECTED_ERROR_MESSAGE = "Terjadi kesalahan saat menjalankan face reading. Coba lagi beberapa saat."


def error_response(status_code: int, error_code: str, message: str) -> JSONResponse:
    body = ErrorResponse(message=message, error_code=error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@router.post(
    "",
    response_model=FaceReadingResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def analyze_face_reading(
    req: FaceReadingRequest,
    request: Request,
    service: FaceReadingService = Depends(get_face_reading_service),
):
    try:
        return service.analyze(req.image, client_key_from_headers(request.headers))
    except FaceReadingError as e:
        if e.status_code >= 500:
            logger.error(f"Face reading failed: code={e.error_code} message={e.message}")
        else:
            logger.info(f"Face reading rejected: status={e.status_code} code={e.error_code}")
        return error_response(e.status_code, e.error_code, e.message)
    except Exception as e:
        logger.exception("Unexpected error during face reading")
        detail = str(e)
        message = f"{UNEXPECTED_ERROR_MESSAGE} ({detail})" if detail else UNEXPECTED_ERROR_MESSAGE
        return error_response(500, "FACE_READING_FAILED", message)
