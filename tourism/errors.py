class TourismError(Exception):
    reason = "error"
    message = "Something went wrong"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailed(TourismError):
    reason = "validation"
    message = "Invalid input"


class DuplicateEmail(TourismError):
    reason = "duplicate_email"
    message = "This email is already registered"


class InvalidCredentials(TourismError):
    # Same text for unknown email and wrong password
    reason = "invalid_credentials"
    message = "Incorrect email or password"


class AlreadySaved(TourismError):
    reason = "already_saved"
    message = "Location is already saved"


class StorageFailure(TourismError):
    reason = "storage"
    message = "Local storage error"


STATUS_BY_REASON = {
    ValidationFailed.reason: 400,
    DuplicateEmail.reason: 409,
    AlreadySaved.reason: 409,
    InvalidCredentials.reason: 401,
    StorageFailure.reason: 500,
    "disabled": 409,
    "unavailable": 503,
    "remote": 502,
}
