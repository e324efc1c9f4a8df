"""
DynamoDB-backed page fetcher.

Each fetch is a single Scan call (NOT a paginator) limited to one page; the
LastEvaluatedKey of the response becomes the next cursor. boto3 is blocking,
so the call runs in a worker thread to keep the event loop responsive.
"""

import asyncio
from typing import Any

import boto3

from ._logging import logger, redact_cursor
from .exceptions import handle_dynamo_errors
from .models import Record
from .pagination import Page
from .serializer import CursorSerializer


class DynamoPageFetcher:
    """
    Fetches pages of records by scanning a DynamoDB table (or one of its GSIs).

    Items are mapped to Record using ``id_attribute`` and ``name_attribute``.
    Items without the id attribute are skipped.

    Note: a Scan page may come back empty while LastEvaluatedKey is still set
    (the Limit counts evaluated items, not returned ones).
    """

    def __init__(
        self,
        table_name: str,
        *,
        page_size: int = 10,
        id_attribute: str = "id",
        name_attribute: str = "display_name",
        index_name: str | None = None,
        client: Any | None = None,
        region: str = "us-east-1",
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")

        self.table_name = table_name
        self.page_size = page_size
        self.id_attribute = id_attribute
        self.name_attribute = name_attribute
        self.index_name = index_name
        self.region = region
        self._client = client
        self.serializer = CursorSerializer()

    @property
    def client(self) -> Any:
        """
        Returns the Boto3 DynamoDB client, creating it on first use.
        Pass ``client=`` to the constructor to inject a custom or mocked one.
        """
        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.region)
        return self._client

    async def fetch(self, cursor: str | None) -> Page:
        return await asyncio.to_thread(self.fetch_sync, cursor)

    def fetch_sync(self, cursor: str | None) -> Page:
        """
        Blocking variant of fetch().

        Raises:
            FetchError: If the cursor is invalid or DynamoDB rejects the scan
        """
        kwargs: dict[str, Any] = {"TableName": self.table_name, "Limit": self.page_size}
        if self.index_name:
            kwargs["IndexName"] = self.index_name
        if cursor is not None:
            kwargs["ExclusiveStartKey"] = self.serializer.decode(cursor)

        logger.info(
            "Executing scan page",
            extra={
                "table": self.table_name,
                "index": self.index_name,
                "limit": self.page_size,
                "cursor_hash": redact_cursor(cursor),
            },
        )

        with handle_dynamo_errors(table_name=self.table_name):
            response = self.client.scan(**kwargs)

        records = []
        for item in response.get("Items", []):
            record = self._to_record(item)
            if record is not None:
                records.append(record)

        raw_key = response.get("LastEvaluatedKey")
        next_cursor = self.serializer.encode(raw_key) if raw_key else None

        return Page(records=records, next_cursor=next_cursor)

    def _to_record(self, item: dict[str, Any]) -> Record | None:
        raw_id = self._scalar(item.get(self.id_attribute))
        if raw_id is None or raw_id == "":
            logger.warning(
                "Skipping item without id attribute",
                extra={"table": self.table_name, "id_attribute": self.id_attribute},
            )
            return None
        raw_name = self._scalar(item.get(self.name_attribute))
        return Record(id=raw_id, display_name=raw_name or "")

    @staticmethod
    def _scalar(attribute: dict[str, Any] | None) -> str | None:
        """Reads a string or number attribute ({"S": ...} / {"N": ...}) as text."""
        if not attribute:
            return None
        for type_code in ("S", "N"):
            if type_code in attribute:
                return str(attribute[type_code])
        return None
