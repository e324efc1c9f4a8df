import base64
import binascii
import json
from decimal import Decimal
from typing import Any, cast

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from .exceptions import CursorError


class CursorSerializer:
    """
    Converts DynamoDB pagination keys to opaque string cursors and back.

    Architectural Note:
    -------------------
    The engine treats cursors as opaque strings, while DynamoDB hands back a
    LastEvaluatedKey in its low-level JSON format ({"pk": {"S": "..."}}).
    The key is first turned into a plain dict (numbers restored from Decimal),
    dumped as compact JSON and wrapped in URL-safe base64, so the cursor
    survives being passed through query strings untouched.
    Only string and number key attributes are supported.
    """

    def __init__(self) -> None:
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def encode(self, last_evaluated_key: dict[str, Any]) -> str:
        """
        Converts a DynamoDB LastEvaluatedKey to a cursor string.

        Input:  {"pk": {"S": "value"}, "sk": {"N": "123"}}
        Output: urlsafe base64 of '{"pk":"value","sk":123}'
        """
        try:
            plain = {
                k: self._restore_to_python(self._deserializer.deserialize(v))
                for k, v in last_evaluated_key.items()
            }
            payload = json.dumps(plain, separators=(",", ":"), sort_keys=True)
        except (TypeError, ValueError) as e:
            raise CursorError(None, original_error=e) from e
        return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")

    def decode(self, cursor: str) -> dict[str, dict[str, Any]]:
        """
        Converts a cursor string back to a DynamoDB ExclusiveStartKey.

        Raises:
            CursorError: If the cursor is not one produced by encode()
        """
        try:
            payload = base64.urlsafe_b64decode(cursor.encode("ascii"))
            plain = json.loads(payload)
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise CursorError(cursor, original_error=e) from e

        if not isinstance(plain, dict) or not plain:
            raise CursorError(cursor)

        try:
            return {
                k: cast(dict[str, Any], self._serializer.serialize(self._prepare_for_dynamo(v)))
                for k, v in plain.items()
            }
        except TypeError as e:
            raise CursorError(cursor, original_error=e) from e

    def _prepare_for_dynamo(self, value: Any) -> Any:
        """float -> Decimal (boto3 requirement)."""
        if isinstance(value, bool):
            return value
        if isinstance(value, float):
            # Go through str to avoid float precision artifacts
            return Decimal(str(value))
        return value

    def _restore_to_python(self, value: Any) -> Any:
        """Decimal -> int (if whole number) or float."""
        if isinstance(value, Decimal):
            if value % 1 == 0:
                return int(value)
            return float(value)
        return value
