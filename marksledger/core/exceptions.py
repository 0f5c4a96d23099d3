# marksledger/core/exceptions.py
"""Custom exceptions for the marks ledger."""


class LedgerError(Exception):
    """Base exception for the marks ledger"""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(LedgerError):
    """Resource not found exception"""
    def __init__(self, resource: str, id=None):
        message = f"{resource} not found"
        if id is not None:
            message += f" with id: {id}"
        super().__init__(message, 404)


class ConfigError(LedgerError):
    """Exam or scheme is not configured well enough to proceed"""
    def __init__(self, message: str):
        super().__init__(message, 400)


class ExamLockedError(LedgerError):
    """Write attempted on a locked (published) exam"""
    def __init__(self, message: str = "Exam is locked (published)"):
        super().__init__(message, 423)


class LedgerFormatError(LedgerError):
    """Uploaded workbook cannot be interpreted; aborts the whole import"""
    def __init__(self, message: str):
        super().__init__(message, 400)


class ValidationException(LedgerError):
    """Validation error exception"""
    def __init__(self, message: str):
        super().__init__(message, 400)


class PermissionDenied(LedgerError):
    """Permission denied exception"""
    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, 403)
