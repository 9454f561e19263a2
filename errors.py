"""
Error taxonomy and the handlers that turn failures into the JSON envelope
``{"success": false, "error": "<message>"}``.

Route handlers only raise; status codes and messages are chosen here.
"""

import logging

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

import config

logger = logging.getLogger(__name__)


class ErrorResponse(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(ErrorResponse):
    status_code = 404


class ValidationFailed(ErrorResponse):
    status_code = 400


class Duplicate(ErrorResponse):
    status_code = 400


class Unauthorized(ErrorResponse):
    status_code = 401


class Forbidden(ErrorResponse):
    status_code = 403


class BadUpload(ErrorResponse):
    status_code = 400


class Internal(ErrorResponse):
    status_code = 500


def error_body(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _field_messages(errors) -> str:
    messages = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "Invalid value")
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return ", ".join(messages)


async def handle_error_response(request: Request, exc: ErrorResponse):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_body(exc.status_code, exc.message)


async def handle_invalid_id(request: Request, exc: InvalidId):
    return error_body(404, "Resource not found")


async def handle_duplicate_key(request: Request, exc: DuplicateKeyError):
    return error_body(400, "Duplicate field value entered")


async def handle_request_validation(request: Request, exc: RequestValidationError):
    return error_body(400, _field_messages(exc.errors()))


async def handle_model_validation(request: Request, exc: ValidationError):
    return error_body(400, _field_messages(exc.errors()))


async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Server Error" if config.is_production() else str(exc) or "Server Error"
    return error_body(500, message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ErrorResponse, handle_error_response)
    app.add_exception_handler(InvalidId, handle_invalid_id)
    app.add_exception_handler(DuplicateKeyError, handle_duplicate_key)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(ValidationError, handle_model_validation)
    app.add_exception_handler(Exception, handle_unexpected)
