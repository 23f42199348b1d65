from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from telebridge.logger import get_logger

logger = get_logger("queue")


class QueueSinkError(RuntimeError):
    """A payload could not be handed to SQS."""


class QueueSink:
    """Forwards raw webhook bodies to the Telegram SQS queue, unmodified."""

    def __init__(self, queue_url: str, region: str, endpoint_url: Optional[str] = None, client=None):
        self.queue_url = queue_url
        self.region = region
        self.endpoint_url = endpoint_url
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client(
                "sqs",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
            )
        return self._client

    def send(self, body: str) -> str:
        try:
            resp = self._get_client().send_message(
                QueueUrl=self.queue_url,
                MessageBody=body,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "queue.send_error",
                extra={"queue_url": self.queue_url, "error": str(e)},
            )
            raise QueueSinkError(f"Failed to send message to SQS: {e}") from e

        message_id = resp["MessageId"]
        logger.info(
            "queue.enqueued",
            extra={"queue_url": self.queue_url, "message_id": message_id},
        )
        return message_id
