"""
Record ingestion against the timestream-write API.
"""
from typing import Any

from ..models import WriteRecordsRequest, WriteStatus


def write_records(client: Any, request: WriteRecordsRequest) -> WriteStatus:
    """
    Submit one write batch.

    Common attributes are sent as-is; the service applies them to every
    record. The batch is accepted or rejected as a whole from the caller's
    point of view.
    """
    response = client.write_records(**request.to_params())
    return WriteStatus.from_response(response)
