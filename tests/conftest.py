import json
import logging
import os
from pathlib import Path

import pytest
from botocore.exceptions import ClientError

# Set before any handler module reads the environment
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ["REGION"] = "us-east-1"
os.environ["STAGE"] = "test"
os.environ["TELEGRAM_QUEUE_URL"] = "https://sqs.us-east-1.amazonaws.com/123456789/test-queue"
os.environ["TELEGRAM_SECRET_NAME"] = "test-telegram-secret"
os.environ["TELEGRAM_SECRET_HEADER"] = "X-Telegram-Bot-Api-Secret-Token"

from telebridge.config import load_settings  # noqa: E402
from telebridge.logger import JsonFormatter  # noqa: E402
from telebridge.queue import QueueSink  # noqa: E402
from telebridge.secrets import SecretProvider  # noqa: E402
from telebridge.validation import CredentialValidator  # noqa: E402

EVENTS_DIR = Path(__file__).parent / "events"

SECRET = "test-secret-token"
SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

TEXT_MESSAGE = {
    "update_id": 123456789,
    "message": {
        "message_id": 1,
        "from": {"id": 987654321, "is_bot": False, "first_name": "John", "username": "johndoe"},
        "chat": {"id": 987654321, "type": "private"},
        "date": 1700000000,
        "text": "Hello from test user!",
    },
}

CALLBACK_QUERY = {
    "update_id": 123456792,
    "callback_query": {
        "id": "callback-123",
        "from": {"id": 987654321, "is_bot": False, "username": "johndoe"},
        "data": "confirm",
    },
}

EDITED_MESSAGE = {
    "update_id": 123456793,
    "edited_message": {
        "message_id": 1,
        "chat": {"id": 987654321, "type": "private"},
        "date": 1700000000,
        "edit_date": 1700000100,
        "text": "Edited text",
    },
}


def client_error(code="ResourceNotFoundException", operation="GetSecretValue"):
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


class StubSecretsManager:
    def __init__(self, secret=SECRET, error=None):
        self.secret = secret
        self.error = error
        self.calls = []

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        if self.error is not None:
            raise self.error
        if self.secret is None:
            return {"Name": SecretId}
        return {"Name": SecretId, "SecretString": self.secret}


class StubSQS:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def send_message(self, QueueUrl, MessageBody):
        self.sent.append({"QueueUrl": QueueUrl, "MessageBody": MessageBody})
        if self.error is not None:
            raise self.error
        return {"MessageId": f"test-message-id-{len(self.sent)}"}


class RecordingHandler(logging.Handler):
    """Collects formatted JSON log lines."""

    def __init__(self):
        super().__init__()
        self.setFormatter(JsonFormatter())
        self.lines = []

    def emit(self, record):
        self.lines.append(self.format(record))


def load_event(name):
    with open(EVENTS_DIR / name, "r", encoding="utf-8") as f:
        return json.load(f)


def api_event(body=None, headers=None, is_base64=False):
    return {
        "body": body,
        "headers": headers if headers is not None else {},
        "httpMethod": "POST",
        "isBase64Encoded": is_base64,
        "path": "/telegram/ingress",
        "requestContext": {"requestId": "test-request-id", "stage": "test"},
    }


def sqs_event(records):
    return {
        "Records": [
            {
                "messageId": rec.get("messageId", f"msg-{idx}"),
                "receiptHandle": f"receipt-handle-{idx}",
                "body": rec["body"],
                "attributes": {"ApproximateReceiveCount": "1"},
                "messageAttributes": {},
                "eventSource": "aws:sqs",
                "awsRegion": "us-east-1",
            }
            for idx, rec in enumerate(records)
        ]
    }


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def secrets_client():
    return StubSecretsManager()


@pytest.fixture
def sqs_client():
    return StubSQS()


@pytest.fixture
def provider(settings, secrets_client):
    return SecretProvider(settings.secret_name, settings.region, client=secrets_client)


@pytest.fixture
def validator(provider):
    return CredentialValidator(provider)


@pytest.fixture
def sink(settings, sqs_client):
    return QueueSink(settings.queue_url, settings.region, client=sqs_client)


@pytest.fixture
def log_lines():
    handler = RecordingHandler()
    names = ("ingress", "processor", "validation", "secrets", "queue", "config")
    loggers = [logging.getLogger(name) for name in names]
    previous = [lg.level for lg in loggers]
    for lg in loggers:
        lg.addHandler(handler)
        lg.setLevel(logging.DEBUG)
    yield handler.lines
    for lg, level in zip(loggers, previous):
        lg.removeHandler(handler)
        lg.setLevel(level)
