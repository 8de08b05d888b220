import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from modules.contracts.services.errors import ErrorKind, SigningError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.CONFIG_ERROR: 500,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.ROLE_NOT_ALLOWED: 400,
    ErrorKind.RENDER_FAILED: 502,
    ErrorKind.SIGN_FAILED: 502,
    ErrorKind.NOTIFY_FAILED: 502,
}


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(SigningError)
    async def signing_error_handler(request: Request, exc: SigningError):
        status_code = STATUS_BY_KIND.get(exc.kind, 500)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(content=exc.to_dict(), status_code=status_code)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(content={"message": "Internal server error"}, status_code=500)
