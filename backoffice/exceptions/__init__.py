"""Custom exceptions for the back-office application."""

class BackofficeError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(BackofficeError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(BackofficeError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(BackofficeError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access", status_code=403):
        super().__init__(message, status_code)

class TranslationBackendError(BackofficeError):
    """Raised by a translation source when the backing query fails."""
    def __init__(self, table, language_code, original=None):
        message = f"Translation query on {table} ({language_code}) failed: {original}"
        super().__init__(message, 503, {'table': table, 'language_code': language_code})
        self.table = table
        self.language_code = language_code
        self.original = original
