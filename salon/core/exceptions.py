"""
Error taxonomy shared by the salon services.

Validation and not-found errors abort a single operation and are shown to
the user. Persistence errors abort the operation as well. Notify errors are
recorded in the message history and never abort the business operation that
triggered the message.
"""
from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError


class SalonError(Exception):
    """Base class for salon service errors"""

    status_code = 400

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ValidationError(SalonError, DjangoValidationError):
    """A required field is missing or a value is not acceptable"""

    def __init__(self, message=''):
        SalonError.__init__(self, message)
        DjangoValidationError.__init__(self, message)

    def __str__(self):
        return self.message


class NotFoundError(SalonError, ObjectDoesNotExist):
    """A referenced id does not resolve"""

    status_code = 404


class PersistenceError(SalonError):
    """The database write itself failed"""

    status_code = 500


class NotifyError(SalonError):
    """The outbound messaging gateway rejected or failed a send"""

    status_code = 502
