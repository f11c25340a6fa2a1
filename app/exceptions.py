class ApiError(Exception):
    """Base class for errors that are rendered as a JSON response.

    Every subclass carries the HTTP status it maps to. ``to_dict`` builds the
    response body: ``{"message": ...}`` plus whatever extra detail the
    subclass attaches.
    """

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"message": self.message}


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Invalid email or password"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "You are not authorized to perform this action"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Resource not found"


class ValidationError(ApiError):
    status_code = 422
    default_message = "The given data was invalid"

    def __init__(self, errors=None, message=None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self):
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class MissingFieldsError(ValidationError):
    def __init__(self, fields):
        super().__init__(
            {field: [f"The {field} field is required."] for field in fields},
            "Missing required fields",
        )
        self.fields = fields

    def to_dict(self):
        body = super().to_dict()
        body["missing_fields"] = self.fields
        return body


class CapacityExceededError(ApiError):
    status_code = 422
    default_message = "The event capacity has been exceeded"


class AlreadyRegisteredError(ApiError):
    status_code = 422
    default_message = "You are already registered for this event"


class CancelledRegistrationError(ApiError):
    status_code = 422
    default_message = "A cancelled registration cannot be checked in"


class AlreadyCheckedInError(ApiError):
    status_code = 422
    default_message = "This participant has already been checked in"

    def __init__(self, check_in=None, message=None):
        super().__init__(message)
        self.check_in = check_in

    def to_dict(self):
        body = super().to_dict()
        if self.check_in is not None:
            body["check_in"] = self.check_in.to_dict()
        return body


class InvalidCodeError(ApiError):
    status_code = 404
    default_message = "Invalid registration code"


class TransactionFailureError(ApiError):
    status_code = 500

    def __init__(self, message=None, error=None):
        super().__init__(message)
        self.error = error

    def to_dict(self):
        body = super().to_dict()
        if self.error:
            body["error"] = self.error
        return body
