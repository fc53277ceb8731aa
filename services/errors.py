"""
Error taxonomy shared by services and the HTTP layer.

Every error carries a stable ``code`` and a ``message`` that can be shown to
the user as is. The API maps each family to one HTTP status.
"""


class CampusEventsError(Exception):
    code = "error"
    message = "Something went wrong. Please try again."

    def __init__(self, message: str = None, **context):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)


# --- NotFound ---

class NotFound(CampusEventsError):
    code = "not_found"
    message = "Not found."


class EventNotFound(NotFound):
    code = "event_not_found"
    message = "Event not found."


class RegistrationNotFound(NotFound):
    code = "registration_not_found"
    message = "Registration not found."


class ProfileNotFound(NotFound):
    code = "profile_not_found"
    message = "User profile not found."


# --- PolicyViolation ---

class PolicyViolation(CampusEventsError):
    code = "policy_violation"
    message = "This action is not allowed."


class EventNotApproved(PolicyViolation):
    code = "event_not_approved"
    message = "Registration is only open for approved events."


class EventFull(PolicyViolation):
    code = "event_full"
    message = "Sorry, this event is full!"


class DuplicateRegistration(PolicyViolation):
    code = "duplicate_registration"
    message = "You are already registered for this event."


class InvalidStatusTransition(PolicyViolation):
    code = "invalid_status_transition"
    message = "Only pending events can be approved or rejected."


class EmailAlreadyRegistered(PolicyViolation):
    code = "email_taken"
    message = "An account with this email already exists."


# --- PermissionDenied ---

class PermissionDenied(CampusEventsError):
    code = "permission_denied"
    message = "You do not have access to this action."


# --- AuthenticationRequired ---

class AuthenticationRequired(CampusEventsError):
    code = "authentication_required"
    message = "Please login to continue."


class InvalidCredentials(AuthenticationRequired):
    code = "invalid_credentials"
    message = "Login failed. Please check your credentials."


class SessionExpired(AuthenticationRequired):
    code = "session_expired"
    message = "Your session has expired. Please login again."


# --- ValidationFailed ---

class ValidationFailed(CampusEventsError):
    code = "validation_failed"
    message = "Invalid input."


class InvalidUpload(ValidationFailed):
    code = "invalid_upload"
    message = "Poster image must be a JPG, PNG, GIF or WEBP file under 5MB."


# --- TransientFailure ---

class TransientFailure(CampusEventsError):
    code = "transient_failure"
    message = "The service is busy at the moment. Please try again."


# --- Storage ---

class StorageError(CampusEventsError):
    code = "storage_error"
    message = "File storage operation failed."
