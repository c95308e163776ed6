"""
Domain Errors

Every error a core operation raises on purpose derives from DomainError.
The API layer maps each family to an HTTP status; callers receive the
message and details verbatim.
"""


class DomainError(Exception):
    """Base class for expected, caller-correctable failures"""

    code = 'domain_error'

    def __init__(self, message: str = '', **details):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.details = details

    def to_dict(self) -> dict:
        return {'error': self.code, 'detail': self.message, **self.details}


class ValidationError(DomainError):
    """Bad input shape or range"""
    code = 'validation_error'


class ConflictError(DomainError):
    """The request collides with concurrent or existing state"""
    code = 'conflict'


class StateError(DomainError):
    """Illegal lifecycle transition"""
    code = 'invalid_state'


class NotFoundError(DomainError):
    """Unknown id or code"""
    code = 'not_found'


class AuthorizationError(DomainError):
    """Actor lacks the role or ownership for the operation"""
    code = 'forbidden'


class StorageError(DomainError):
    """Transient storage failure that survived the retry budget"""
    code = 'storage_unavailable'
