# wellcontrol/utils/response_formatter.py

from typing import Dict, Any, Optional

def success_response(
    data: Any = None,
    message: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: Response data
        message: Optional success message
        metadata: Optional metadata

    Returns:
        Standardized success response dictionary
    """
    response = {
        "status": "success",
        "data": data
    }

    if message:
        response["message"] = message

    if metadata:
        response["metadata"] = metadata

    return response

def error_response(
    message: str,
    error_code: str = "internal_error",
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        message: Error message
        error_code: Error code for the client
        details: Additional error details

    Returns:
        Standardized error response dictionary
    """
    return {
        "status": "error",
        "error": {
            "code": error_code,
            "message": message,
            "details": details or {}
        }
    }

class ResponseFormatter:
    """
    Utility class for formatting API responses.
    """

    @staticmethod
    def success(
        data: Any = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return success_response(data, message, metadata)

    @staticmethod
    def error(
        message: str,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return error_response(message, error_code, details)

# Create a singleton instance for easy access
response_formatter = ResponseFormatter()
