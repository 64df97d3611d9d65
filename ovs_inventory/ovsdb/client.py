"""
Query client contract.

The transport that actually talks to an OVSDB server lives outside this
package. Anything implementing `QueryClient` can be handed to the resolvers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from ..exceptions import EmptyResultSet, QueryFailed
from .result import Result

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Schema:
    name: str = ""
    version: str = ""


class QueryClient(Protocol):
    def transact(self, database: str, query: str) -> Result:
        """Run a read query (`SELECT <columns> FROM <table>`) and return its rows."""
        ...

    def get_schema(self, database: str) -> Schema:
        ...


def run_query(client: QueryClient, database: str, query: str) -> Result:
    """Run a mandatory query; transport errors become `QueryFailed`."""
    try:
        result = client.transact(database, query)
    except Exception as e:
        logger.warning("query_failed", database=database, query=query, error=str(e))
        raise QueryFailed(query, e, database=database) from e
    logger.debug("query_completed", database=database, query=query, rows=len(result.rows))
    return result


def require_rows(client: QueryClient, database: str, query: str) -> Result:
    """Run a mandatory query that must return at least one row."""
    result = run_query(client, database, query)
    if not result.rows:
        raise EmptyResultSet(query, database=database)
    return result
