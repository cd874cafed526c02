from __future__ import annotations

from botocore.exceptions import ClientError

from .errors import ConditionFailedError, NotFoundError, StoreError, ValidationError


def map_client_error(err: ClientError) -> StoreError:
    code = str(err.response.get("Error", {}).get("Code", ""))
    message = str(err.response.get("Error", {}).get("Message", ""))

    if code == "ConditionalCheckFailedException":
        return ConditionFailedError(message)
    if code == "ValidationException":
        return ValidationError(message)
    if code == "ResourceNotFoundException":
        return NotFoundError(message)

    return StoreError(code=code or "UnknownError", message=message or str(err))
