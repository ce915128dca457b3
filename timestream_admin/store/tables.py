"""
Table operations against the timestream-write API.
"""
from typing import Any, Dict

from ..models import (
    CreateTableRequest,
    ListTablesRequest,
    TableInfo,
    TableRequest,
    UpdateTableRequest,
)
from .pagination import Paginated


def create_table(client: Any, request: CreateTableRequest) -> TableInfo:
    """Create a table with the given retention. Raises ClientError(ConflictException) if it exists."""
    response = client.create_table(**request.to_params())
    return TableInfo.from_response(response["Table"])


def describe_table(client: Any, request: TableRequest) -> TableInfo:
    response = client.describe_table(**request.to_params())
    return TableInfo.from_response(response["Table"])


def list_tables(client: Any, request: ListTablesRequest) -> Paginated[TableInfo]:
    """Lazily list the tables of one database."""
    return Paginated(
        client,
        "list_tables",
        "Tables",
        TableInfo.from_response,
        page_size=request.page_size,
        DatabaseName=request.database_name,
    )


def update_table(client: Any, request: UpdateTableRequest) -> TableInfo:
    """Replace the table retention properties."""
    response = client.update_table(**request.to_params())
    return TableInfo.from_response(response["Table"])


def delete_table(client: Any, request: TableRequest) -> Dict[str, Any]:
    return client.delete_table(**request.to_params())
