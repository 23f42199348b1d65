"""
Telegram Bridge Shared Modules
==============================

Shared helpers for the Telegram webhook → SQS bridge. Both Lambda entry
points (``ingress.py`` and ``processor.py``) import from here:

- config.py      → environment-backed Settings
- logger.py      → structured JSON logging
- errors.py      → AppError taxonomy and API Gateway error responses
- secrets.py     → cached shared secret from AWS Secrets Manager
- validation.py  → shared-secret header validation
- queue.py       → SQS queue sink

Environment variables expected:
  • REGION / AWS_REGION        - AWS region for Secrets Manager and SQS
  • STAGE                      - Deployment stage (prod/production hides stack traces)
  • TELEGRAM_QUEUE_URL         - URL of the SQS queue receiving raw updates
  • TELEGRAM_SECRET_NAME       - Name of the Secrets Manager secret
  • TELEGRAM_SECRET_HEADER     - Header carrying the secret (default: X-Telegram-Bot-Api-Secret-Token)
  • AWS_ENDPOINT               - Endpoint override, e.g. LocalStack (optional)
  • LOG_LEVEL                  - Log verbosity (default: INFO)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
