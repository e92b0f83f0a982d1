# Overview: Base class for business-rule errors raised by the service layer.

class ServiceError(Exception):
    """
    Business-rule violation raised by a service.

    status_code is the HTTP status the route layer should answer with
    (400 invalid, 404 missing or wrong state, 409 conflict).
    """
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
