"""Error types shared by the pricing engine and the HTTP layer."""


class BakepriceError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'message': self.message}


class ValidationError(BakepriceError):
    """Raised when a request body is missing fields or carries bad values"""
    status_code = 400


class UnauthorizedError(BakepriceError):
    """Raised when no company scope was supplied with the request"""
    status_code = 401


class ForbiddenError(BakepriceError):
    """Raised when the caller's role may not perform the operation"""
    status_code = 403


class NotFoundError(BakepriceError):
    """Raised when a referenced entity does not exist in the caller's company"""
    status_code = 404


class DomainInvalidError(BakepriceError):
    """Raised when percentages add up to a price that cannot exist (>= 100%)"""
    status_code = 422
