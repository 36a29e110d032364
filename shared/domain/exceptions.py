"""
Domain Errors

Business rule violations are expected outcomes: they are returned to the
caller with a stable code instead of being treated as server faults.
"""


class DomainError(Exception):
    """Base class for expected, caller-recoverable business errors"""

    code = 'domain_error'
    status_code = 400

    def __init__(self, message: str = ''):
        super().__init__(message or self.default_message())
        self.message = str(self)

    @classmethod
    def default_message(cls) -> str:
        return cls.__doc__ or cls.__name__

    def to_dict(self) -> dict:
        return {'code': self.code, 'detail': self.message}
