# app/errors.py
# Domain errors raised by the services; app.main maps them to HTTP responses.


class StoreError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(StoreError):
    status_code = 404


class ValidationFailed(StoreError):
    status_code = 422


class Conflict(StoreError):
    status_code = 409


class MalformedEvent(StoreError):
    status_code = 400
