"""
Inventory Exceptions

Errors raised while decoding query results and assembling domain objects.
Mandatory-path failures surface as one of these; soft enrichment failures are
absorbed by the resolvers and never reach the caller.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class InventoryError(Exception):
    """Base class for all inventory errors."""

    code: str = "inventory_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


# -------------------------
# Decode-time errors
# -------------------------

class DecodeError(InventoryError):
    """A result cell could not be extracted as requested."""

    code = "decode_error"


class ColumnNotFound(DecodeError):
    code = "column_not_found"

    def __init__(self, column: str) -> None:
        super().__init__(f"column '{column}' not found", column=column)
        self.column = column


class UnexpectedType(DecodeError):
    code = "unexpected_type"

    def __init__(self, column: str, actual: str, expected: Sequence[str]) -> None:
        expected_str = " or ".join(f"'{e}'" for e in expected)
        super().__init__(
            f"data type '{actual}' for '{column}' column is unexpected in this context "
            f"(expected {expected_str})",
            column=column,
            actual=actual,
            expected=list(expected),
        )
        self.column = column
        self.actual = actual
        self.expected = list(expected)


# -------------------------
# Identity errors
# -------------------------

class IdentityError(InventoryError):
    code = "identity_error"


class IdentityUnavailable(IdentityError):
    """Neither the database nor the system-id file yielded an identity."""

    code = "identity_unavailable"

    def __init__(self, message: str, causes: Optional[List[BaseException]] = None) -> None:
        super().__init__(message, causes=[str(c) for c in causes] if causes else None)
        self.causes: List[BaseException] = list(causes or [])


class IdentityTooLong(IdentityError):
    code = "identity_too_long"

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            f"system-id is greater than what is currently allowed: {length} vs {limit}",
            length=length,
            limit=limit,
        )
        self.length = length
        self.limit = limit


class IdentityMismatch(IdentityError):
    code = "identity_mismatch"

    def __init__(self, database_id: str, expected_id: str) -> None:
        super().__init__(
            f"found 'system-id' mismatch {database_id} (db) vs. {expected_id} (config)",
            database_id=database_id,
            expected_id=expected_id,
        )
        self.database_id = database_id
        self.expected_id = expected_id


class MandatoryFieldMissing(InventoryError):
    code = "mandatory_field_missing"

    def __init__(self, field: str) -> None:
        super().__init__(f"no mandatory '{field}' found", field=field)
        self.field = field


# -------------------------
# Query errors
# -------------------------

class QueryError(InventoryError):
    code = "query_error"

    def __init__(self, message: str, query: str, database: Optional[str] = None) -> None:
        super().__init__(message, query=query, database=database)
        self.query = query
        self.database = database


class QueryFailed(QueryError):
    """Transport-level failure of a mandatory query."""

    code = "query_failed"

    def __init__(self, query: str, cause: BaseException, database: Optional[str] = None) -> None:
        super().__init__(f"the '{query}' query failed: {cause}", query=query, database=database)
        self.cause = cause


class EmptyResultSet(QueryError):
    code = "empty_result_set"

    def __init__(self, query: str, database: Optional[str] = None) -> None:
        super().__init__(f"the '{query}' query did not return any rows", query=query, database=database)


class MalformedResult(QueryError):
    """A mandatory query returned rows that could not be decoded."""

    code = "malformed_result"

    def __init__(self, query: str, cause: BaseException, database: Optional[str] = None) -> None:
        super().__init__(
            f"the '{query}' query returned results but erred: {cause}", query=query, database=database
        )
        self.cause = cause


class ControlSocketError(InventoryError):
    """The control socket could not be reached or answered with an error."""

    code = "control_socket_error"
