from __future__ import annotations


class DynareadPyError(Exception):
    pass


class ContractViolation(DynareadPyError):
    pass


class StoreError(DynareadPyError):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class ConditionFailedError(StoreError):
    def __init__(self, message: str) -> None:
        super().__init__(code="ConditionalCheckFailedException", message=message)


class ValidationError(StoreError):
    def __init__(self, message: str) -> None:
        super().__init__(code="ValidationException", message=message)


class NotFoundError(StoreError):
    def __init__(self, message: str) -> None:
        super().__init__(code="ResourceNotFoundException", message=message)
