from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from telebridge.logger import get_logger

logger = get_logger("secrets")


class SecretProviderError(RuntimeError):
    """The shared secret could not be retrieved from Secrets Manager."""


class SecretProvider:
    """
    Fetches the Telegram webhook secret from AWS Secrets Manager and keeps it
    for the life of the container.

    The first `get()` hits Secrets Manager; later calls return the cached
    value until `clear()` is called. Concurrent cold callers may each fetch
    once; nothing de-duplicates them.
    """

    def __init__(self, secret_name: str, region: str, endpoint_url: Optional[str] = None, client=None):
        self.secret_name = secret_name
        self.region = region
        self.endpoint_url = endpoint_url
        self._client = client
        self._owns_client = client is None
        self._cached: Optional[str] = None

    @property
    def is_cached(self) -> bool:
        return self._cached is not None

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client(
                "secretsmanager",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
            )
        return self._client

    def get(self) -> str:
        if self._cached is not None:
            logger.debug("Using cached Telegram secret")
            return self._cached

        logger.info(
            "Fetching Telegram secret from Secrets Manager",
            extra={"secret_name": self.secret_name, "region": self.region},
        )

        try:
            resp = self._get_client().get_secret_value(SecretId=self.secret_name)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to fetch Telegram secret",
                extra={"secret_name": self.secret_name, "error": str(e)},
            )
            raise SecretProviderError(f"Failed to fetch Telegram secret: {e}") from e

        secret_str = resp.get("SecretString")
        if not secret_str:
            msg = f"Secret '{self.secret_name}' has no SecretString payload"
            logger.error(msg)
            raise SecretProviderError(msg)

        self._cached = secret_str
        return secret_str

    def clear(self) -> None:
        """Forget the cached secret (rotation, test isolation)."""
        self._cached = None
        if self._owns_client:
            self._client = None
