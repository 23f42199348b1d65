import enum
import hmac
from dataclasses import dataclass
from typing import Optional

from telebridge.logger import get_logger
from telebridge.secrets import SecretProvider, SecretProviderError

logger = get_logger("validation")


class Outcome(enum.Enum):
    VALID = "valid"
    NO_SECRET_PROVIDED = "no_secret_provided"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class ValidationResult:
    outcome: Outcome
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.VALID


class CredentialValidator:
    """
    Checks the webhook secret header against the stored secret.

    A missing header and a wrong token are caller faults; a Secrets Manager
    failure is a server fault and is reported separately so the ingress can
    answer 500 instead of 401.
    """

    def __init__(self, provider: SecretProvider):
        self.provider = provider

    def validate(self, provided_token: Optional[str]) -> ValidationResult:
        if provided_token is None:
            result = ValidationResult(
                Outcome.NO_SECRET_PROVIDED,
                "No secret token provided in request headers",
            )
            logger.warning("Failed to validate secret", extra={"reason": result.outcome.value})
            return result

        try:
            expected = self.provider.get()
        except SecretProviderError as e:
            result = ValidationResult(Outcome.PROVIDER_UNAVAILABLE, str(e))
            logger.error("Failed to validate secret", extra={"reason": result.outcome.value})
            return result

        if not hmac.compare_digest(provided_token.encode("utf-8"), expected.encode("utf-8")):
            result = ValidationResult(
                Outcome.MISMATCH,
                "Secret token does not match expected value",
            )
            logger.warning("Failed to validate secret", extra={"reason": result.outcome.value})
            return result

        logger.debug("Telegram secret validation passed")
        return ValidationResult(Outcome.VALID)
