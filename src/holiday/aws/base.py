"""Shared helpers for translating botocore failures."""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

AWS_ERRORS = (ClientError, BotoCoreError)


def error_code(exc: BaseException) -> str:
    """AWS error code of a ClientError, empty string for anything else."""
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", ""))
    return ""


def is_not_found(exc: BaseException, *codes: str) -> bool:
    # HEAD requests carry no body, so S3 reports a bare "404" code
    return error_code(exc) in codes
