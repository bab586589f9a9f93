"""Domain errors raised by the service layer and mapped to HTTP by portlink.api.errors."""


class PortLinkError(Exception):
    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PortLinkError):
    status_code = 404
    error_code = "not_found"


class ForbiddenError(PortLinkError):
    status_code = 403
    error_code = "forbidden"


class ConflictError(PortLinkError):
    status_code = 409
    error_code = "conflict"


class InvalidSortError(PortLinkError, ValueError):
    status_code = 400
    error_code = "invalid_sort"

    def __init__(self, sort_by: str, allowed):
        super().__init__(
            f"Unknown sortBy '{sort_by}'. Expected one of: {', '.join(allowed)}"
        )
        self.sort_by = sort_by
