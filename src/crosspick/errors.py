from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    REF_NOT_FOUND = "Reference not found"
    COMMAND_FAILED = "Command failed"
    HOST_API_ERROR = "Host API request failed"
    POLICY_VIOLATION = "Policy violation"
    UNCLASSIFIED = "Unexpected error"


class CrosspickError(Exception):
    kind: FailureKind = FailureKind.UNCLASSIFIED

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.kind.value}: {message}")


class RefNotFound(CrosspickError):
    kind = FailureKind.REF_NOT_FOUND

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Expected to fetch '{ref}', but couldn't find it")


class CommandFailed(CrosspickError):
    kind = FailureKind.COMMAND_FAILED

    def __init__(self, command: str, status: int):
        self.command = command
        self.status = status
        super().__init__(f"'{command}' failed with exit code {status}")


class HostApiError(CrosspickError):
    kind = FailureKind.HOST_API_ERROR

    def __init__(self, operation: str, status: Optional[int] = None):
        self.operation = operation
        self.status = status
        suffix = f" with status {status}" if status is not None else ""
        super().__init__(f"{operation} failed{suffix}")


class PolicyViolation(CrosspickError):
    kind = FailureKind.POLICY_VIOLATION
