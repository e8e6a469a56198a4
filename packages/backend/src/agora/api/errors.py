"""Exception handlers — map failures onto the API's error taxonomy.

- request validation (bad id, missing/empty field, bad query) → 400
- not found → 404, raised by routes as HTTPException
- StorageError → 500

Learn: FastAPI answers validation failures with 422 by default; this API
uses 400 for every client-side input error instead.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from agora.storage.base import StorageError

logger = structlog.get_logger()


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "http.storage_error",
        method=request.method,
        path=request.url.path,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content={"detail": "Storage error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
