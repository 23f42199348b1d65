import json
from typing import Any, Dict, Iterable, List

from telebridge.logger import get_logger

logger = get_logger("processor")

# Telegram Update fields, in the order they are checked
UPDATE_TYPES = (
    "message",
    "edited_message",
    "channel_post",
    "edited_channel_post",
    "callback_query",
    "inline_query",
    "chosen_inline_result",
    "shipping_query",
    "pre_checkout_query",
    "poll",
    "poll_answer",
    "my_chat_member",
    "chat_member",
    "chat_join_request",
)


class InvalidUpdateError(ValueError):
    """The queued body is not a Telegram update object."""


def get_update_type(update: Dict[str, Any]) -> str:
    """Classify a Telegram update for logging only."""
    for update_type in UPDATE_TYPES:
        if update.get(update_type):
            return update_type
    return "unknown"


def process_message(record: Dict[str, Any]) -> None:
    """
    Parse and handle a single SQS record.

    Raises InvalidUpdateError when the body is not a JSON object; such a
    message can never become a valid update, so it is reported for
    redelivery and ends up in the DLQ for inspection.
    """
    message_id = record.get("messageId")
    raw_body = record.get("body") or ""

    logger.debug("processor.message_received", extra={"message_id": message_id})

    try:
        update = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise InvalidUpdateError(f"Invalid JSON in message body: {e}") from e

    if not isinstance(update, dict):
        raise InvalidUpdateError(
            f"Expected a JSON object, got {type(update).__name__}"
        )

    update_type = get_update_type(update)
    if "update_id" not in update:
        logger.warning(
            "processor.missing_update_id",
            extra={"message_id": message_id, "update_type": update_type},
        )

    logger.info(
        "processor.update_received",
        extra={
            "message_id": message_id,
            "update_id": update.get("update_id"),
            "update_type": update_type,
        },
    )

    # Downstream handling of the update is not implemented yet.


def handle_batch(records: Iterable[Dict[str, Any]]) -> List[str]:
    """
    Process every record independently and return the ids of those that
    failed, in the order they were received. Records without a usable
    messageId are logged and left out, since they cannot be reported back.
    """
    failed: List[str] = []

    for index, rec in enumerate(records):
        message_id = None
        try:
            message_id = rec["messageId"]
            if not isinstance(message_id, str) or not message_id:
                raise InvalidUpdateError("Record has no usable messageId")
            process_message(rec)
        except Exception as e:
            body = rec.get("body") if isinstance(rec, dict) else None
            logger.error(
                "processor.message_failed",
                extra={
                    "message_id": message_id,
                    "record_index": index,
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "body_preview": str(body or "")[:200],
                },
            )
            # SQS fails the whole batch on an unknown itemIdentifier
            if isinstance(message_id, str) and message_id:
                failed.append(message_id)

    return failed


def lambda_handler(event, context):
    records = event.get("Records") or []
    logger.info("processor.lambda_start: received %d records", len(records))

    failed = handle_batch(records)

    if failed:
        logger.warning(
            "processor.batch_item_failures: count=%d",
            len(failed),
            extra={"message_ids": failed},
        )

    # Requires ReportBatchItemFailures on the event source mapping
    return {"batchItemFailures": [{"itemIdentifier": mid} for mid in failed]}
