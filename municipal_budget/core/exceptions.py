"""
Error taxonomy for the budget API.

Every error raised by the service layer derives from ``BudgetAPIError`` and
carries the HTTP status it is reported with. The exception handler in
``municipal_budget.main`` renders them as ``{"error": ..., "details": ...}``.
"""

from typing import Optional

from fastapi import status


class BudgetAPIError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"
    # Whether details reach the caller or only the log
    public_details: bool = True

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details and self.public_details:
            body["details"] = self.details
        return body


class InvalidInput(BudgetAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class MissingDepartment(InvalidInput):
    message = "Department is required"


class MissingUpload(InvalidInput):
    message = "No CSV file provided"


class EmptyImport(InvalidInput):
    message = "No valid budget data found"


class InvalidRequestBody(InvalidInput):
    message = "Invalid request body"


class NoValidData(BudgetAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "No valid budget data to analyze"


class StoreError(BudgetAPIError):
    message = "Budget store error"
    public_details = False


class StoreQueryError(StoreError):
    message = "Failed to fetch municipal_budget data"


class StoreWriteError(StoreError):
    message = "Failed to import budget data"
    public_details = True


class ConfigurationError(BudgetAPIError):
    message = "Service is not configured"


class UpstreamError(BudgetAPIError):
    """Non-success response from the text-generation service.

    A rate-limited response that survived every retry keeps its 429 status;
    any other failure, including a transport error with no status at all,
    is reported as a bad gateway.
    """

    message = "Failed to get AI insights"

    def __init__(self, upstream_status: Optional[int], body: str = ""):
        self.upstream_status = upstream_status
        self.body = body
        if upstream_status is None:
            details = f"Generation service unreachable: {body}"
        else:
            details = f"Upstream status {upstream_status}: {body}"
        super().__init__(details=details)
        if upstream_status == status.HTTP_429_TOO_MANY_REQUESTS:
            self.status_code = status.HTTP_429_TOO_MANY_REQUESTS
        else:
            self.status_code = status.HTTP_502_BAD_GATEWAY
