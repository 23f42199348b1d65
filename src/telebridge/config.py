import os
from dataclasses import dataclass
from typing import Mapping, Optional

from telebridge.logger import get_logger

logger = get_logger("config")

DEFAULT_SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

_PRODUCTION_STAGES = ("prod", "production")


@dataclass(frozen=True)
class Settings:
    region: str
    stage: str
    queue_url: str
    secret_name: str
    secret_header: str = DEFAULT_SECRET_HEADER
    endpoint_url: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.stage.lower() in _PRODUCTION_STAGES


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Load bridge configuration from environment variables.

    REGION:                 AWS region (falls back to AWS_REGION, set by Lambda)
    STAGE:                  deployment stage; prod/production hides stack traces
    TELEGRAM_QUEUE_URL:     SQS queue receiving raw Telegram updates
    TELEGRAM_SECRET_NAME:   Secrets Manager secret holding the webhook token
    TELEGRAM_SECRET_HEADER: header carrying the token (optional)
    AWS_ENDPOINT:           endpoint override for LocalStack (optional)

    Raises RuntimeError naming every missing variable. This is a cold-start
    failure, not a per-request one.
    """
    env = os.environ if environ is None else environ

    region = env.get("REGION") or env.get("AWS_REGION")
    stage = env.get("STAGE")
    queue_url = env.get("TELEGRAM_QUEUE_URL")
    secret_name = env.get("TELEGRAM_SECRET_NAME")

    missing = []
    if not region:
        missing.append("REGION")
    if not stage:
        missing.append("STAGE")
    if not queue_url:
        missing.append("TELEGRAM_QUEUE_URL")
    if not secret_name:
        missing.append("TELEGRAM_SECRET_NAME")

    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        logger.error(msg)
        raise RuntimeError(msg)

    return Settings(
        region=region,
        stage=stage,
        queue_url=queue_url,
        secret_name=secret_name,
        secret_header=env.get("TELEGRAM_SECRET_HEADER") or DEFAULT_SECRET_HEADER,
        endpoint_url=env.get("AWS_ENDPOINT") or None,
    )
