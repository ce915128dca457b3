"""
High-level SDK for Amazon Timestream administration and ingestion.

The SDK exposes one main class, TimeSeriesAdminClient, a thin façade over the
``timestream-write`` API:

- Databases: create, describe, list, update (KMS key), delete
- Tables: create, describe, list, update (retention), delete
- Records: write a batch, optionally with common attributes, or a DataFrame

Error handling differs per operation:

- create: an existing database/table is a benign skip (Outcome.ALREADY_EXISTS)
- describe / delete / update_table: errors are logged and raised
- write / update_database: errors are logged and returned in the AdminResult
"""
import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Union

import boto3
import pandas as pd
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from . import frames, store
from .errors import AdminResult, AlreadyExists, NotFound, Outcome, classify
from .models import (
    CreateDatabaseRequest,
    CreateTableRequest,
    DatabaseInfo,
    DatabaseRequest,
    ListDatabasesRequest,
    ListTablesRequest,
    Record,
    RetentionProperties,
    TableInfo,
    TableRequest,
    TimeUnit,
    UpdateDatabaseRequest,
    UpdateTableRequest,
    WriteBatch,
    WriteRecordsRequest,
    status_code,
)
from .store.pagination import Paginated

logger = logging.getLogger(__name__)

# Transport settings: retries and timeouts live in botocore, not in this client
DEFAULT_CONFIG = Config(
    read_timeout=20,
    max_pool_connections=5000,
    retries={"max_attempts": 10},
)

_TRANSPORT_ERRORS = (ClientError, BotoCoreError)

RecordLike = Union[Record, Dict[str, Any]]


class TimeSeriesAdminClient:
    """
    Client for Timestream database/table administration and record ingestion.

    The client is stateless apart from the transport it wraps, so one
    instance can serve any number of databases and tables. It is as
    thread-safe as the transport (boto3 clients are).

    Example:
        >>> from timestream_admin import TimeSeriesAdminClient, RetentionProperties

        >>> client = TimeSeriesAdminClient(region_name="us-east-1")
        >>> client.create_database("devops")
        >>> client.create_table("devops", "host_metrics",
        ...                     RetentionProperties(memory_store_retention_hours=24,
        ...                                         magnetic_store_retention_days=7))
        >>> client.write_records("devops", "host_metrics", [
        ...     {"dimensions": {"hostname": "host1"}, "measure_name": "cpu_utilization",
        ...      "measure_value": "13.5", "measure_value_type": "DOUBLE", "time": "1700000000000"},
        ... ])
        >>> for db in client.list_databases():
        ...     print(db.name)

    Args:
        client: An existing ``timestream-write`` client (or compatible
            transport). If omitted one is built from the environment.
        region_name: AWS region (default: TIMESTREAM_REGION / AWS_REGION)
        profile_name: AWS profile (default: AWS_PROFILE)
        config: botocore Config for the built client (default: DEFAULT_CONFIG)
    """

    def __init__(
        self,
        client: Any = None,
        region_name: Optional[str] = None,
        profile_name: Optional[str] = None,
        config: Optional[Config] = None,
    ):
        self._owns_client = client is None
        self._client = client if client is not None else _make_client(region_name, profile_name, config)

    @property
    def transport(self) -> Any:
        """The underlying timestream-write client."""
        return self._client

    def close(self):
        """Close the underlying client if this instance created it."""
        if self._owns_client and hasattr(self._client, "close"):
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # =========================================================================
    # Databases
    # =========================================================================

    def create_database(self, database_name: str, kms_key_id: Optional[str] = None,
                        tags: Optional[Dict[str, str]] = None) -> AdminResult:
        """
        Create a database.

        Returns Outcome.CREATED with the DatabaseInfo, or Outcome.ALREADY_EXISTS
        when the database already exists (not an error).

        Raises:
            AdminError: For any other failure
        """
        request = CreateDatabaseRequest(database_name=database_name, kms_key_id=kms_key_id, tags=tags)
        logger.info("Creating database")
        try:
            info = store.databases.create_database(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "CreateDatabase")
            if isinstance(err, AlreadyExists):
                logger.info("Database [%s] exists. Skipping database creation", database_name)
                return AdminResult(Outcome.ALREADY_EXISTS, error=err)
            logger.error("Could not create database [%s] = %s", database_name, err)
            raise err from e
        logger.info("Database [%s] created successfully", database_name)
        return AdminResult(Outcome.CREATED, value=info)

    def describe_database(self, database_name: str) -> DatabaseInfo:
        """
        Describe a database.

        Raises:
            NotFound: If the database does not exist
            AdminError: For any other failure
        """
        request = DatabaseRequest(database_name=database_name)
        logger.info("Describing database")
        try:
            info = store.databases.describe_database(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "DescribeDatabase")
            logger.error("Database doesn't exist = %s", err)
            raise err from e
        logger.info("Database %s has id %s", database_name, info.arn)
        return info

    def list_databases(self, page_size: int = 20) -> Paginated[DatabaseInfo]:
        """
        Lazily list all databases.

        Pages of ``page_size`` are fetched as iteration advances; iterating
        the result again starts over.
        """
        request = ListDatabasesRequest(page_size=page_size)
        logger.info("Listing databases")
        return store.databases.list_databases(self._client, request)

    def update_database(self, database_name: str, kms_key_id: Optional[str] = None) -> AdminResult:
        """
        Replace the KMS key of a database.

        Never raises for remote failures:
        - no (or empty) ``kms_key_id``: Outcome.SKIPPED, nothing is sent
        - database missing: Outcome.SKIPPED with the NotFound error attached
        - any other failure: Outcome.FAILED with the error attached
        """
        if not kms_key_id:
            logger.info("Skipping UpdateDatabase because KmsKeyId was not given")
            return AdminResult(Outcome.SKIPPED)

        request = UpdateDatabaseRequest(database_name=database_name, kms_key_id=kms_key_id)
        logger.info("Updating database")
        try:
            info = store.databases.update_database(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "UpdateDatabase")
            if isinstance(err, NotFound):
                logger.warning("Database [%s] does not exist. Skipping UpdateDatabase", database_name)
                return AdminResult(Outcome.SKIPPED, error=err)
            logger.error("UpdateDatabase failed: %s", err)
            return AdminResult(Outcome.FAILED, error=err)
        logger.info("Database [%s] updated successfully with kmsKeyId %s", database_name, kms_key_id)
        return AdminResult(Outcome.UPDATED, value=info)

    def delete_database(self, database_name: str) -> AdminResult:
        """
        Delete a database. The service refuses while it still has tables.

        Raises:
            NotFound: If the database does not exist
            AdminError: For any other failure
        """
        request = DatabaseRequest(database_name=database_name)
        logger.info("Deleting database")
        try:
            response = store.databases.delete_database(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "DeleteDatabase")
            if isinstance(err, NotFound):
                logger.error("Database %s doesn't exist = %s", database_name, err)
            else:
                logger.error("Could not delete Database %s = %s", database_name, err)
            raise err from e
        status = status_code(response)
        logger.info("Delete database status: %s", status)
        return AdminResult(Outcome.DELETED, value=status)

    # =========================================================================
    # Tables
    # =========================================================================

    def create_table(self, database_name: str, table_name: str, retention: RetentionProperties,
                     tags: Optional[Dict[str, str]] = None) -> AdminResult:
        """
        Create a table with the given retention.

        Returns Outcome.CREATED with the TableInfo, or Outcome.ALREADY_EXISTS
        when the table already exists.

        Raises:
            AdminError: For any other failure (including a missing database)
        """
        request = CreateTableRequest(
            database_name=database_name, table_name=table_name, retention=retention, tags=tags,
        )
        logger.info("Creating table")
        try:
            info = store.tables.create_table(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "CreateTable")
            if isinstance(err, AlreadyExists):
                logger.info(
                    "Table [%s] exists on database [%s]. Skipping table creation", table_name, database_name,
                )
                return AdminResult(Outcome.ALREADY_EXISTS, error=err)
            logger.error("Could not create table [%s] = %s", table_name, err)
            raise err from e
        logger.info("Table [%s] successfully created.", table_name)
        return AdminResult(Outcome.CREATED, value=info)

    def update_table(self, database_name: str, table_name: str, retention: RetentionProperties) -> AdminResult:
        """
        Replace the retention properties of a table.

        Raises:
            NotFound: If the table does not exist
            AdminError: For any other failure
        """
        request = UpdateTableRequest(database_name=database_name, table_name=table_name, retention=retention)
        logger.info("Updating table")
        try:
            info = store.tables.update_table(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "UpdateTable")
            logger.error("Could not update table %s = %s", table_name, err)
            raise err from e
        logger.info("Table updated")
        return AdminResult(Outcome.UPDATED, value=info)

    def describe_table(self, database_name: str, table_name: str) -> TableInfo:
        """
        Describe a table.

        Raises:
            NotFound: If the table (or its database) does not exist
            AdminError: For any other failure
        """
        request = TableRequest(database_name=database_name, table_name=table_name)
        logger.info("Describing table")
        try:
            info = store.tables.describe_table(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "DescribeTable")
            logger.error("Table %s doesn't exist = %s", table_name, err)
            raise err from e
        logger.info("Table %s has id %s", table_name, info.arn)
        return info

    def list_tables(self, database_name: str, page_size: int = 20) -> Paginated[TableInfo]:
        """Lazily list the tables of a database. See :meth:`list_databases`."""
        request = ListTablesRequest(database_name=database_name, page_size=page_size)
        logger.info("Listing tables")
        return store.tables.list_tables(self._client, request)

    def delete_table(self, database_name: str, table_name: str) -> AdminResult:
        """
        Delete a table.

        Raises:
            NotFound: If the table does not exist
            AdminError: For any other failure
        """
        request = TableRequest(database_name=database_name, table_name=table_name)
        logger.info("Deleting table")
        try:
            response = store.tables.delete_table(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "DeleteTable")
            if isinstance(err, NotFound):
                logger.error("Table %s doesn't exist = %s", table_name, err)
            else:
                logger.error("Could not delete table %s = %s", table_name, err)
            raise err from e
        status = status_code(response)
        logger.info("Delete table status: %s", status)
        return AdminResult(Outcome.DELETED, value=status)

    # =========================================================================
    # Records
    # =========================================================================

    def write_records(self, database_name: str, table_name: str,
                      records: Union[WriteBatch, Sequence[RecordLike]]) -> AdminResult:
        """
        Write one batch of records.

        Args:
            database_name: Target database
            table_name: Target table
            records: A WriteBatch, or a sequence of Records / record dicts
                (at most 100)

        Returns:
            AdminResult with Outcome.WRITTEN and a WriteStatus, or
            Outcome.FAILED with the error attached. Failures are logged,
            never raised.

        Raises:
            pydantic.ValidationError: If the records themselves are invalid
        """
        batch = records if isinstance(records, WriteBatch) else WriteBatch(records=tuple(records))
        logger.info("Writing records")
        return self._write(database_name, table_name, batch, "WriteRecords")

    def write_records_with_common_attributes(self, database_name: str, table_name: str,
                                             common_attributes: RecordLike,
                                             records: Sequence[RecordLike]) -> AdminResult:
        """
        Write one batch of records sharing common attributes.

        ``common_attributes`` is a template (dimensions, measure value type,
        time, ...) applied by the service to every record; values set on a
        record take precedence. See :meth:`write_records` for the result.
        """
        common = common_attributes if isinstance(common_attributes, Record) else Record(**common_attributes)
        batch = WriteBatch(records=tuple(records), common_attributes=common)
        logger.info("Writing records with extracting common attributes")
        return self._write(database_name, table_name, batch, "writeRecordsWithCommonAttributes")

    def write_dataframe(
        self,
        database_name: str,
        table_name: str,
        df: pd.DataFrame,
        measure_columns: Sequence[str],
        dimension_columns: Sequence[str] = (),
        time_column: str = "time",
        time_unit: TimeUnit = TimeUnit.MILLISECONDS,
        common_attributes: Optional[RecordLike] = None,
        batch_size: Optional[int] = None,
    ) -> List[AdminResult]:
        """
        Write a DataFrame, one record per row and measure column.

        Records are sent in batches of at most ``batch_size`` (default and
        maximum: 100). Each batch succeeds or fails on its own; a failed
        batch does not stop the following ones.

        Returns:
            One AdminResult per batch, in order

        Raises:
            ValueError: If the DataFrame cannot be converted
        """
        records = frames.records_from_dataframe(
            df,
            measure_columns=measure_columns,
            dimension_columns=dimension_columns,
            time_column=time_column,
            time_unit=time_unit,
        )
        if common_attributes is not None and not isinstance(common_attributes, Record):
            common_attributes = Record(**common_attributes)

        results = []
        for chunk in frames.chunked(records, batch_size):
            batch = WriteBatch(records=tuple(chunk), common_attributes=common_attributes)
            results.append(self._write(database_name, table_name, batch, "WriteRecords"))

        failed = sum(1 for r in results if not r.ok)
        logger.info("Wrote %d records in %d batches (%d failed)", len(records), len(results), failed)
        return results

    def _write(self, database_name: str, table_name: str, batch: WriteBatch, label: str) -> AdminResult:
        request = WriteRecordsRequest(database_name=database_name, table_name=table_name, batch=batch)
        try:
            status = store.records.write_records(self._client, request)
        except _TRANSPORT_ERRORS as e:
            err = classify(e, "WriteRecords")
            logger.error("Error: %s", err)
            return AdminResult(Outcome.FAILED, error=err)
        logger.info("%s Status: %s", label, status.status_code)
        return AdminResult(Outcome.WRITTEN, value=status)


# =============================================================================
# Internal helper functions (not part of public API)
# =============================================================================

def _get_region() -> str:
    """Get the AWS region from environment variables."""
    region = (
        os.environ.get("TIMESTREAM_REGION")
        or os.environ.get("AWS_REGION")
        or os.environ.get("AWS_DEFAULT_REGION")
    )
    if not region:
        raise ValueError(
            "AWS region not configured. Set TIMESTREAM_REGION or AWS_REGION environment variable."
        )
    return region


def _make_client(region_name: Optional[str] = None, profile_name: Optional[str] = None,
                 config: Optional[Config] = None) -> Any:
    """Build a timestream-write client from arguments and environment."""
    session = boto3.Session(
        profile_name=profile_name or os.environ.get("AWS_PROFILE"),
        region_name=region_name or _get_region(),
    )
    return session.client("timestream-write", config=config or DEFAULT_CONFIG)
