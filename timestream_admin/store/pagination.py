"""
Lazy listings over paginated timestream-write operations.
"""
from typing import Any, Callable, Dict, Generic, Iterator, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import classify

T = TypeVar("T")


class Paginated(Generic[T]):
    """
    A lazy, restartable view over a paginated list operation.

    Nothing is requested until iteration starts; each page costs one round
    trip, fetched only when the consumer gets to it. Iterating again starts a
    fresh listing from the first page. Transport errors surface as
    AdminError while iterating.

    Args:
        client: timestream-write client (anything with ``get_paginator``)
        operation: Paginated operation name, e.g. ``"list_databases"``
        result_key: Key holding the items in each page, e.g. ``"Databases"``
        convert: Callable building the public item from the raw dict
        page_size: Items requested per page
        **params: Extra operation parameters (e.g. ``DatabaseName``)
    """

    def __init__(
        self,
        client: Any,
        operation: str,
        result_key: str,
        convert: Callable[[Dict[str, Any]], T],
        page_size: int,
        **params: Any,
    ):
        self._client = client
        self._operation = operation
        # API name used in errors, e.g. "ListDatabases"
        self._api_name = "".join(part.title() for part in operation.split("_"))
        self._result_key = result_key
        self._convert = convert
        self._page_size = page_size
        self._params = params

    def pages(self) -> Iterator[Dict[str, Any]]:
        """Iterate over the raw response pages."""
        paginator = self._client.get_paginator(self._operation)
        yield from paginator.paginate(
            PaginationConfig={"PageSize": self._page_size},
            **self._params,
        )

    def __iter__(self) -> Iterator[T]:
        try:
            for page in self.pages():
                for item in page.get(self._result_key, []):
                    yield self._convert(item)
        except (ClientError, BotoCoreError) as e:
            raise classify(e, self._api_name) from e

    def __repr__(self) -> str:
        return f"Paginated(operation={self._operation!r}, page_size={self._page_size!r}, params={self._params!r})"
