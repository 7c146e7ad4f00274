"""
Error rendering - Map HTTP errors onto the ``{status, message}`` envelope.

Routes translate domain exceptions into HTTPException; the handlers here
render those (and request validation failures) as ErrorResponse bodies.
4xx responses carry ``status: "fail"``, 5xx responses ``status: "error"``.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from invito.api.models import ErrorResponse


def error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(status="error" if status_code >= 500 else "fail", message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Summarize pydantic errors as ``field: reason`` pairs."""
    problems = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return error_response(422, "; ".join(problems))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on an application."""
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
