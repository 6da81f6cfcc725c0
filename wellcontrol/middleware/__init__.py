from wellcontrol.middleware.logging_middleware import LoggingMiddleware
from wellcontrol.middleware.error_middleware import ErrorHandlingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlingMiddleware"]
