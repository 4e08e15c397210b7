"""
Typed Exception Hierarchy for the Admissions Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the admission workflow need to tell apart "this record does
not exist", "this operation is not legal in the current status", "the
payload is malformed" and "an external collaborator failed".  The last
kind is safe to retry; the others are not.  Parsing message strings to
make that decision is fragile, so:

  - each failure has its own class, so callers catch by type;
  - each class has a stable ``code`` that an API can return as is;
  - the details (operation, status, collaborator) are attributes.

Example:
    try:
        service.admit(admission_id)
    except InvalidTransitionError as e:
        api_response(code=e.code, operation=e.operation, status=e.current_status)
    except CollaboratorError as e:
        schedule_retry(admission_id, collaborator=e.collaborator)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AdmissionsError (base)
    |
    +-- NotFoundError
    |   +-- AdmissionNotFoundError
    |   +-- StudentNotFoundError
    |
    +-- InvalidTransitionError
    |   +-- GuardRejectedError
    |
    +-- AdmissionValidationError
    |
    +-- CollaboratorError
    |   +-- CollaboratorTimeoutError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- NotificationDeliveryError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Lookup          | ADMISSION_NOT_FOUND           | Admission id doesn't exist
                | STUDENT_NOT_FOUND             | Enrolled student can't be read back
----------------|-------------------------------|---------------------------------------
Workflow        | INVALID_TRANSITION            | Operation illegal from current status
                | GUARD_REJECTED                | Transition legal but guard unmet
----------------|-------------------------------|---------------------------------------
Payload         | VALIDATION_ERROR              | Missing / malformed payload field
----------------|-------------------------------|---------------------------------------
Collaborator    | COLLABORATOR_ERROR            | Document / id issuer failed
                | COLLABORATOR_TIMEOUT          | Document / id issuer timed out
----------------|-------------------------------|---------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT      | Admission changed since it was loaded
----------------|-------------------------------|---------------------------------------
Notification    | NOTIFICATION_DELIVERY_FAILED  | Gateway rejected a message (never
                |                               | surfaces from the workflow engine)

===============================================================================
HANDLING PATTERNS
===============================================================================

1. RETRY ONLY WHAT IS SAFE TO RETRY:

    except (CollaboratorError, OptimisticLockError):
        # Nothing was written; reload and try again.
        retry()
    except (InvalidTransitionError, AdmissionValidationError):
        # Retrying the same request will fail the same way.
        reject_request()

2. READ ATTRIBUTES, NOT MESSAGES:

    except InvalidTransitionError as e:
        return {"error": e.code, "operation": e.operation, "status": e.current_status}
"""


class AdmissionsError(Exception):
    """
    Base exception for all admissions errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "ADMISSIONS_ERROR"


# Lookup exceptions


class NotFoundError(AdmissionsError):
    """Base exception for missing aggregates."""

    code: str = "NOT_FOUND"


class AdmissionNotFoundError(NotFoundError):
    """Admission with given ID was not found."""

    code: str = "ADMISSION_NOT_FOUND"

    def __init__(self, admission_id: str):
        self.admission_id = admission_id
        super().__init__(f"Admission not found: {admission_id}")


class StudentNotFoundError(NotFoundError):
    """Student with given ID was not found."""

    code: str = "STUDENT_NOT_FOUND"

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(f"Student not found: {student_id}")


# Workflow exceptions


class InvalidTransitionError(AdmissionsError):
    """
    Operation attempted from a status that does not allow it.

    Raised before any field is mutated; the stored admission is unchanged.
    """

    code: str = "INVALID_TRANSITION"

    def __init__(self, operation: str, current_status: str, reason: str | None = None):
        self.operation = operation
        self.current_status = current_status
        message = f"Cannot {operation} from status: {current_status}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class GuardRejectedError(InvalidTransitionError):
    """Transition exists for the current status but its guard is not satisfied."""

    code: str = "GUARD_REJECTED"

    def __init__(self, operation: str, current_status: str, guard: str):
        self.guard = guard
        super().__init__(operation, current_status, reason=f"guard {guard} not satisfied")


# Payload exceptions


class AdmissionValidationError(AdmissionsError):
    """Caller-supplied payload is missing a required field or is malformed."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Collaborator exceptions


class CollaboratorError(AdmissionsError):
    """
    A synchronous collaborator (document generator, id issuer) failed.

    Nothing has been written when this is raised, so the operation can be
    retried against freshly loaded state.
    """

    code: str = "COLLABORATOR_ERROR"

    def __init__(self, collaborator: str, reason: str):
        self.collaborator = collaborator
        self.reason = reason
        super().__init__(f"Collaborator {collaborator} failed: {reason}")


class CollaboratorTimeoutError(CollaboratorError):
    """A synchronous collaborator did not answer within its time budget."""

    code: str = "COLLABORATOR_TIMEOUT"

    def __init__(self, collaborator: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(collaborator, f"timed out after {timeout_seconds}s")


# Concurrency exceptions


class ConcurrencyError(AdmissionsError):
    """Another writer got to the row first."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """The stored version is no longer the one this write was based on."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id} "
            f"(expected version {expected_version}): "
            "it was changed by a concurrent writer"
        )


# Notification exceptions


class NotificationDeliveryError(AdmissionsError):
    """
    Notification gateway could not deliver a message.

    Raised by gateway implementations only.  The workflow engine logs and
    discards it; it never reaches workflow callers.
    """

    code: str = "NOTIFICATION_DELIVERY_FAILED"

    def __init__(self, phone_number: str, event_tag: str, reason: str):
        self.phone_number = phone_number
        self.event_tag = event_tag
        self.reason = reason
        super().__init__(
            f"Notification {event_tag} to {phone_number} failed: {reason}"
        )
