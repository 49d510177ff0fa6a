"""
app/exceptions.py

Erros de domínio. Cada classe carrega o status HTTP correspondente; a
tradução para o envelope `{message, details}` é feita pelos handlers
registrados em app/main.py.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    status_code = 404


class AlreadyExistsError(AppError):
    status_code = 409


class ForbiddenError(AppError):
    status_code = 403


class InvalidArgumentError(AppError):
    status_code = 400


class AuthenticationFailedError(AppError):
    status_code = 401


class RateLimitExceededError(AppError):
    status_code = 429

    def __init__(self, message: str, retry_after: int, limit: int):
        super().__init__(message)
        self.retry_after = retry_after
        self.limit = limit
