# app/domain/errors.py
"""
Bledy domenowe marketplace.

Kazdy blad dziedziczy tez po wbudowanym wyjatku (ValueError -> 400,
PermissionError -> 403, ...), wiec mozna lapac jedno albo drugie.
"""


class MarketError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MarketError, LookupError):
    status_code = 404


class InvalidInputError(MarketError, ValueError):
    status_code = 400


class InvalidStateError(MarketError, ValueError):
    status_code = 400


class ForbiddenError(MarketError, PermissionError):
    status_code = 403


class ConflictError(MarketError, RuntimeError):
    status_code = 409
