from __future__ import annotations


class ViemindError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(ViemindError):
    status_code = 400


class Unauthorized(ViemindError):
    status_code = 401


class Forbidden(ViemindError):
    status_code = 403


class NotFound(ViemindError):
    status_code = 404


class Conflict(ViemindError):
    status_code = 409
