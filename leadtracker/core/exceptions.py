"""Custom exceptions for the lead tracker."""


class LeadTrackerException(Exception):
    """Base exception for the lead tracker."""

    pass


class ValidationError(LeadTrackerException):
    """Raised when validation fails."""

    pass


class LeadValidationError(ValidationError):
    """Raised when a lead form fails field validation.

    ``errors`` maps each offending field to the message shown next to it.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Lead form has invalid fields: {fields}")


class NotFoundError(LeadTrackerException):
    """Raised when a resource is not found."""

    pass


class ConfigurationError(LeadTrackerException):
    """Raised when configuration is invalid."""

    pass


class AuthenticationError(LeadTrackerException):
    """Raised when a confirmation password check fails."""

    pass


class PasswordMismatchError(AuthenticationError):
    """Raised when the delete/change password does not match the stored one."""

    pass
