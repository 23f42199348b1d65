"""
Application error taxonomy.

Components raise these; only the ingress handler turns them into API
Gateway responses via `get_error_response`.
"""

import json
import traceback
from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 500
    is_operational = False
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    is_operational = True
    default_message = "Bad Request"


class UnauthorizedError(AppError):
    status_code = 401
    is_operational = True
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    is_operational = True
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    is_operational = True
    default_message = "Not Found"


class InternalServerError(AppError):
    status_code = 500
    is_operational = False
    default_message = "Internal Server Error"


class ServiceUnavailableError(AppError):
    status_code = 503
    is_operational = True
    default_message = "Service Unavailable"


def is_app_error(error: BaseException) -> bool:
    return isinstance(error, AppError)


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def get_error_response(error: BaseException, include_stack: bool = False) -> Dict[str, Any]:
    """
    Map any exception to an API Gateway proxy response.

    Unclassified errors become a generic 500. The stack trace is only
    attached when `include_stack` is set (non-production stages).
    """
    if is_app_error(error):
        status_code = error.status_code
        body: Dict[str, Any] = {"error": error.message}
    else:
        status_code = 500
        body = {"error": InternalServerError.default_message}

    if include_stack:
        body["stack"] = _format_stack(error)

    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }
