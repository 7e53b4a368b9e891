"""Typed error hierarchy for the compliance engine.

Every failure inside the engine surfaces as one of these types. The API layer
translates them into HTTP responses; library callers catch them directly.
"""


class ComplianceEngineError(Exception):
    """Base class for all engine errors.

    Attributes:
        message: Human-readable description of the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ComplianceEngineError):
    """Raised when caller-supplied input is malformed or incomplete.

    Covers operator profiles with unknown enum values or missing fields,
    scoping answers outside a question's options, and status records that
    belong to a different assessment.
    """


class NotFoundError(ComplianceEngineError):
    """Raised when a referenced framework, requirement or report kind is absent."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} '{identifier}' not found")
        self.resource = resource
        self.identifier = identifier


class ComputationError(ComplianceEngineError):
    """Raised when an assessment cannot be computed correctly.

    A malformed catalog entry or an invalid weight table aborts the whole
    assessment rather than producing a partially wrong score.
    """
