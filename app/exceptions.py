from starlette import status


class AppError(Exception):
    """Base error converted into the JSON error envelope by the app handlers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "app_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "invalid_input"


class UpstreamError(AppError):
    """A third-party API failed or reported a non-ok result."""

    error_type = "upstream_error"


class ParseError(AppError):
    """Generated text did not contain a usable JSON object."""

    error_type = "parse_error"


class ConfigError(AppError):
    error_type = "config_error"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "forbidden"
