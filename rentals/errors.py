"""
Domain errors raised by the store and the command handlers.

Each error carries the HTTP status it maps to; the mapping itself lives in
``error_handlers``.
"""


class RentalsError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(RentalsError):
    status_code = 404

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity


class DuplicateError(RentalsError):
    status_code = 400


class BookingConflictError(RentalsError):
    status_code = 400

    def __init__(self, detail: str = "Property is not available during the selected dates"):
        super().__init__(detail)


class InvalidDateRangeError(RentalsError):
    status_code = 422

    def __init__(self, detail: str = "End date must not be before start date"):
        super().__init__(detail)


class InvalidDocumentError(RentalsError):
    status_code = 400


class StoreError(RentalsError):
    status_code = 500
