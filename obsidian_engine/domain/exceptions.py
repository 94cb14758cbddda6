"""Domain-specific exceptions"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in a request payload"""

    field: str
    message: str
    code: str


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InputLimitError(DomainException):
    """Payload is well-formed but outside operating limits or internally inconsistent"""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        super().__init__("; ".join(f"{i.field}: {i.message}" for i in self.issues))


class IdempotencyConflictError(DomainException):
    """Idempotency key was already used with a different request body"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Idempotency key '{key}' was already used with a different request")
