# face_reading/main.py
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from face_reading.core.config import LOG_LEVEL
from face_reading.routers.face_reading_router import error_response, router as face_reading_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Face Reading Orchestrator", version="0.1.0")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Invalid request body on {request.url.path}: {exc.errors()}")
    return error_response(400, "INVALID_REQUEST", "Permintaan tidak valid.")


@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(face_reading_router)
