import logging
import traceback
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from wellcontrol.utils.error_handling import APIError
from wellcontrol.utils.response_formatter import response_formatter

logger = logging.getLogger(__name__)

class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Converts exceptions escaping the route handlers into the standard error
    envelope. APIErrors keep their status code; anything else becomes a 500.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except APIError as e:
            logger.warning(f"API error: {e.error_code} - {e.message}")
            return JSONResponse(
                status_code=e.status_code,
                content=response_formatter.error(
                    message=e.message,
                    error_code=e.error_code,
                    details=e.details
                )
            )
        except Exception as e:
            tb = traceback.format_exc()
            logger.error(f"Unexpected error: {str(e)}\n{tb}")

            return JSONResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                content=response_formatter.error(
                    message="An unexpected error occurred",
                    error_code="internal_error",
                    details={"error_type": type(e).__name__}
                )
            )
