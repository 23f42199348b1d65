import base64
import binascii
import json
from typing import Any, Dict, Mapping, Optional

from telebridge.config import Settings, load_settings
from telebridge.errors import (
    BadRequestError,
    InternalServerError,
    UnauthorizedError,
    get_error_response,
)
from telebridge.logger import get_logger
from telebridge.queue import QueueSink
from telebridge.secrets import SecretProvider
from telebridge.validation import CredentialValidator, Outcome

logger = get_logger("ingress")


def _build():
    """
    Build settings, secret provider and queue sink from the environment.

    Missing configuration raises RuntimeError, which fails the Lambda init
    phase before any request is accepted.
    """
    settings = load_settings()
    provider = SecretProvider(
        settings.secret_name,
        settings.region,
        endpoint_url=settings.endpoint_url,
    )
    validator = CredentialValidator(provider)
    sink = QueueSink(
        settings.queue_url,
        settings.region,
        endpoint_url=settings.endpoint_url,
    )
    return settings, validator, sink


# Built once per container and reused across warm invocations
settings, validator, sink = _build()


def reset() -> None:
    """Rebuild container state from the current environment (rotation, tests)."""
    global settings, validator, sink
    settings, validator, sink = _build()


def get_header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    """
    Case-insensitive header lookup. HTTP API (v2) lowercases header names,
    REST API (v1) passes them through as sent.
    """
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _read_body(event: dict) -> str:
    body = event.get("body")
    if not body:
        raise BadRequestError("Request body is required")

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise BadRequestError("Request body is not valid base64 text")
        if not body:
            raise BadRequestError("Request body is required")

    return body


def _ok() -> Dict[str, Any]:
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"message": "OK"}),
    }


def handle(event: dict, validator: CredentialValidator, sink: QueueSink, settings: Settings) -> Dict[str, Any]:
    """
    Validate one Telegram webhook call and enqueue its raw body.

    Every path ends in a response: 200 once the body is on the queue,
    400 for an empty body, 401 for a missing or wrong secret, 500 when
    Secrets Manager or SQS fails.
    """
    try:
        token = get_header(event.get("headers"), settings.secret_header)

        result = validator.validate(token)
        if result.outcome is Outcome.NO_SECRET_PROVIDED or result.outcome is Outcome.MISMATCH:
            raise UnauthorizedError()
        if result.outcome is Outcome.PROVIDER_UNAVAILABLE:
            raise InternalServerError("Failed to fetch Telegram secret")
        if result.outcome is not Outcome.VALID:
            raise InternalServerError(f"Unhandled validation outcome: {result.outcome.value}")

        body = _read_body(event)
        message_id = sink.send(body)

        logger.info(
            "ingress.accepted",
            extra={"message_id": message_id, "body_length": len(body)},
        )
        return _ok()

    except Exception as e:
        response = get_error_response(e, include_stack=not settings.is_production)
        log = logger.error if response["statusCode"] >= 500 else logger.warning
        log(
            "ingress.rejected",
            extra={
                "status_code": response["statusCode"],
                "error_type": type(e).__name__,
                "error": str(e),
            },
        )
        return response


def lambda_handler(event, context):
    logger.info(
        "ingress.lambda_start",
        extra={
            "request_id": getattr(context, "aws_request_id", None),
            "has_body": bool(event.get("body")),
        },
    )

    return handle(event, validator, sink, settings)
