"""
Shared error base for the services layer.

Every domain exception raised by a service carries a machine-readable
``code``, a human-readable ``message`` and an optional ``details`` payload.
Views catch them and convert them to HTTP responses with ``to_dict()``:

    try:
        allocation = allocate_receipt_number(org_id=org_id, year=2025, ...)
    except RangeServiceError as e:
        return Response(e.to_dict(), status=409)
"""


class ServiceError(Exception):
    """Base exception for all typed service errors."""

    default_code = 'SERVICE_ERROR'

    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self):
        payload = {
            'error': self.message,
            'code': self.code,
        }
        if self.details is not None:
            payload['details'] = self.details
        return payload
