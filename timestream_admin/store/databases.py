"""
Database operations against the timestream-write API.

Each function issues exactly one request (listings: one per page) and lets
transport errors propagate; classification and logging happen in the SDK.
"""
from typing import Any, Dict

from ..models import (
    CreateDatabaseRequest,
    DatabaseInfo,
    DatabaseRequest,
    ListDatabasesRequest,
    UpdateDatabaseRequest,
)
from .pagination import Paginated


def create_database(client: Any, request: CreateDatabaseRequest) -> DatabaseInfo:
    """Create a database. Raises ClientError(ConflictException) if it exists."""
    response = client.create_database(**request.to_params())
    return DatabaseInfo.from_response(response["Database"])


def describe_database(client: Any, request: DatabaseRequest) -> DatabaseInfo:
    response = client.describe_database(**request.to_params())
    return DatabaseInfo.from_response(response["Database"])


def list_databases(client: Any, request: ListDatabasesRequest) -> Paginated[DatabaseInfo]:
    """Lazily list all databases, following continuation tokens as needed."""
    return Paginated(
        client,
        "list_databases",
        "Databases",
        DatabaseInfo.from_response,
        page_size=request.page_size,
    )


def update_database(client: Any, request: UpdateDatabaseRequest) -> DatabaseInfo:
    """Replace the database KMS key."""
    response = client.update_database(**request.to_params())
    return DatabaseInfo.from_response(response["Database"])


def delete_database(client: Any, request: DatabaseRequest) -> Dict[str, Any]:
    """
    Delete a database.

    The service rejects the call while the database still holds tables.
    Returns the raw response (carries the HTTP status code).
    """
    return client.delete_database(**request.to_params())
