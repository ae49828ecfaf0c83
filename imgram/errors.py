class AppError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(AppError):
    """Bad identifiers, query parameters or request framing."""

    status_code = 400


class UnsupportedFormat(AppError):
    status_code = 400


class DecodeFailed(AppError):
    status_code = 400


class NotFound(AppError):
    status_code = 404


class StorageFailure(AppError):
    status_code = 500
