from collections.abc import Generator
from contextlib import contextmanager

from botocore.exceptions import BotoCoreError, ClientError


class PageSyncError(Exception):
    """Base exception for all pagesync errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class FetchError(PageSyncError):
    """
    Raised by a PageFetcher when a page could not be fetched.

    The description is a human readable text; the engine embeds it in the
    error message it emits to listeners.
    """

    def __init__(self, description: str, original_error: Exception | None = None) -> None:
        super().__init__(description, original_error)
        self.description = description


class CursorError(FetchError):
    """Raised when a pagination cursor cannot be decoded."""

    def __init__(self, cursor: str | None, original_error: Exception | None = None) -> None:
        super().__init__("Invalid pagination cursor", original_error)
        self.cursor = cursor


class TableNotFoundError(FetchError):
    """Raised when the DynamoDB table does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ThrottledError(FetchError):
    """Raised when DynamoDB throttles requests."""

    def __init__(
        self, description: str = "Request rate exceeded", original_error: Exception | None = None
    ) -> None:
        super().__init__(description, original_error)


class RequestTimeoutError(FetchError):
    """Raised when a request to DynamoDB times out."""

    def __init__(
        self, description: str = "Request timed out", original_error: Exception | None = None
    ) -> None:
        super().__init__(description, original_error)


@contextmanager
def handle_dynamo_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches botocore errors raised while fetching a page
    and raises the appropriate FetchError subclass.

    Args:
        table_name: Optional table name for better error messages

    Usage:
        with handle_dynamo_errors(table_name="people"):
            client.scan(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name=table_name or "unknown", original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise ThrottledError(description=error_message, original_error=e) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise RequestTimeoutError(description=error_message, original_error=e) from e

        # Unknown error: wrap in generic FetchError
        raise FetchError(
            description=f"DynamoDB error ({error_code}): {error_message}", original_error=e
        ) from e
    except BotoCoreError as e:
        # Connection failures, read timeouts, missing credentials...
        raise FetchError(description=str(e), original_error=e) from e
