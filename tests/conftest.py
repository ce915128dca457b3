"""Pytest configuration and fixtures for timestream_admin tests."""
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from timestream_admin import RetentionProperties, TimeSeriesAdminClient

ACCOUNT_ARN = "arn:aws:timestream:us-east-1:123456789012"


def client_error(code, message, operation, status=400, **extra):
    """Build the ClientError botocore raises for a service error response."""
    response = {
        "Error": {"Code": code, "Message": message},
        "ResponseMetadata": {"HTTPStatusCode": status},
        **extra,
    }
    return ClientError(response, operation)


def _merge(common, record):
    """Apply common attributes the way the service does (record values win)."""
    if not common:
        return dict(record)
    merged = {k: v for k, v in common.items() if k != "Dimensions"}
    merged.update({k: v for k, v in record.items() if k != "Dimensions"})
    dims = {d["Name"]: d for d in common.get("Dimensions", [])}
    dims.update({d["Name"]: d for d in record.get("Dimensions", [])})
    if dims:
        merged["Dimensions"] = list(dims.values())
    return merged


class FakePaginator:
    """Follows NextToken like a botocore paginator."""

    def __init__(self, transport, operation):
        self._method = getattr(transport, operation)

    def paginate(self, PaginationConfig=None, **params):
        page_size = (PaginationConfig or {}).get("PageSize")
        token = None
        while True:
            kwargs = dict(params)
            if page_size:
                kwargs["MaxResults"] = page_size
            if token:
                kwargs["NextToken"] = token
            page = self._method(**kwargs)
            yield page
            token = page.get("NextToken")
            if not token:
                return


class FakeTimestreamWrite:
    """
    In-memory stand-in for a boto3 ``timestream-write`` client.

    Keeps databases, tables and written rows in dicts, records every call in
    ``calls`` and raises real ClientErrors for the service error cases the
    admin client handles. ``fail_next[method] = error`` makes the next call
    of ``method`` raise ``error``.
    """

    def __init__(self):
        self.databases = {}
        self.tables = {}
        self.rows = {}
        self.calls = []
        self.fail_next = {}
        self.closed = False

    # -- helpers --------------------------------------------------------------

    def _call(self, method, kwargs):
        self.calls.append((method, kwargs))
        if method in self.fail_next:
            raise self.fail_next.pop(method)

    def calls_to(self, method):
        return [kw for m, kw in self.calls if m == method]

    @staticmethod
    def _ok(**body):
        return {**body, "ResponseMetadata": {"HTTPStatusCode": 200}}

    def _require_db(self, name, operation):
        if name not in self.databases:
            raise client_error("ResourceNotFoundException", f"The database {name} does not exist.", operation, 404)

    def _require_table(self, db, table, operation):
        self._require_db(db, operation)
        if (db, table) not in self.tables:
            raise client_error("ResourceNotFoundException", f"The table {table} does not exist.", operation, 404)

    def _db_view(self, name):
        db = dict(self.databases[name])
        db["TableCount"] = sum(1 for d, _ in self.tables if d == name)
        return db

    @staticmethod
    def _page(items, key, MaxResults=None, NextToken=None):
        start = int(NextToken or 0)
        size = MaxResults or len(items) or 1
        body = {key: items[start:start + size]}
        if start + size < len(items):
            body["NextToken"] = str(start + size)
        return body

    # -- databases ------------------------------------------------------------

    def create_database(self, DatabaseName, KmsKeyId=None, Tags=None):
        self._call("create_database", {"DatabaseName": DatabaseName, "KmsKeyId": KmsKeyId, "Tags": Tags})
        if DatabaseName in self.databases:
            raise client_error("ConflictException", f"The database {DatabaseName} already exists.", "CreateDatabase", 409)
        now = datetime.now(timezone.utc)
        self.databases[DatabaseName] = {
            "DatabaseName": DatabaseName,
            "Arn": f"{ACCOUNT_ARN}:database/{DatabaseName}",
            "KmsKeyId": KmsKeyId or "arn:aws:kms:us-east-1:123456789012:key/default",
            "CreationTime": now,
            "LastUpdatedTime": now,
        }
        return self._ok(Database=self._db_view(DatabaseName))

    def describe_database(self, DatabaseName):
        self._call("describe_database", {"DatabaseName": DatabaseName})
        self._require_db(DatabaseName, "DescribeDatabase")
        return self._ok(Database=self._db_view(DatabaseName))

    def update_database(self, DatabaseName, KmsKeyId):
        self._call("update_database", {"DatabaseName": DatabaseName, "KmsKeyId": KmsKeyId})
        self._require_db(DatabaseName, "UpdateDatabase")
        self.databases[DatabaseName]["KmsKeyId"] = KmsKeyId
        self.databases[DatabaseName]["LastUpdatedTime"] = datetime.now(timezone.utc)
        return self._ok(Database=self._db_view(DatabaseName))

    def delete_database(self, DatabaseName):
        self._call("delete_database", {"DatabaseName": DatabaseName})
        self._require_db(DatabaseName, "DeleteDatabase")
        if any(d == DatabaseName for d, _ in self.tables):
            raise client_error(
                "ValidationException", f"Database {DatabaseName} still has tables.", "DeleteDatabase",
            )
        del self.databases[DatabaseName]
        return self._ok()

    def list_databases(self, MaxResults=None, NextToken=None):
        self._call("list_databases", {"MaxResults": MaxResults, "NextToken": NextToken})
        items = [self._db_view(n) for n in sorted(self.databases)]
        return self._ok(**self._page(items, "Databases", MaxResults, NextToken))

    # -- tables ---------------------------------------------------------------

    def create_table(self, DatabaseName, TableName, RetentionProperties=None, Tags=None):
        self._call("create_table", {
            "DatabaseName": DatabaseName, "TableName": TableName,
            "RetentionProperties": RetentionProperties, "Tags": Tags,
        })
        self._require_db(DatabaseName, "CreateTable")
        if (DatabaseName, TableName) in self.tables:
            raise client_error("ConflictException", f"The table {TableName} already exists.", "CreateTable", 409)
        now = datetime.now(timezone.utc)
        self.tables[(DatabaseName, TableName)] = {
            "DatabaseName": DatabaseName,
            "TableName": TableName,
            "Arn": f"{ACCOUNT_ARN}:database/{DatabaseName}/table/{TableName}",
            "TableStatus": "ACTIVE",
            "RetentionProperties": dict(RetentionProperties),
            "CreationTime": now,
            "LastUpdatedTime": now,
        }
        self.rows[(DatabaseName, TableName)] = []
        return self._ok(Table=dict(self.tables[(DatabaseName, TableName)]))

    def describe_table(self, DatabaseName, TableName):
        self._call("describe_table", {"DatabaseName": DatabaseName, "TableName": TableName})
        self._require_table(DatabaseName, TableName, "DescribeTable")
        return self._ok(Table=dict(self.tables[(DatabaseName, TableName)]))

    def update_table(self, DatabaseName, TableName, RetentionProperties=None):
        self._call("update_table", {
            "DatabaseName": DatabaseName, "TableName": TableName, "RetentionProperties": RetentionProperties,
        })
        self._require_table(DatabaseName, TableName, "UpdateTable")
        table = self.tables[(DatabaseName, TableName)]
        table["RetentionProperties"] = dict(RetentionProperties)
        table["LastUpdatedTime"] = datetime.now(timezone.utc)
        return self._ok(Table=dict(table))

    def delete_table(self, DatabaseName, TableName):
        self._call("delete_table", {"DatabaseName": DatabaseName, "TableName": TableName})
        self._require_table(DatabaseName, TableName, "DeleteTable")
        del self.tables[(DatabaseName, TableName)]
        del self.rows[(DatabaseName, TableName)]
        return self._ok()

    def list_tables(self, DatabaseName=None, MaxResults=None, NextToken=None):
        self._call("list_tables", {"DatabaseName": DatabaseName, "MaxResults": MaxResults, "NextToken": NextToken})
        self._require_db(DatabaseName, "ListTables")
        items = [dict(t) for (d, _), t in sorted(self.tables.items()) if d == DatabaseName]
        return self._ok(**self._page(items, "Tables", MaxResults, NextToken))

    # -- records --------------------------------------------------------------

    def write_records(self, DatabaseName, TableName, Records, CommonAttributes=None):
        self._call("write_records", {
            "DatabaseName": DatabaseName, "TableName": TableName,
            "Records": Records, "CommonAttributes": CommonAttributes,
        })
        self._require_table(DatabaseName, TableName, "WriteRecords")
        effective = [_merge(CommonAttributes, r) for r in Records]
        rejected = [
            {"RecordIndex": i, "Reason": "Record is missing MeasureName or Time."}
            for i, r in enumerate(effective)
            if "MeasureName" not in r or "Time" not in r
        ]
        if rejected:
            raise client_error(
                "RejectedRecordsException", "One or more records have been rejected.", "WriteRecords",
                RejectedRecords=rejected,
            )
        self.rows[(DatabaseName, TableName)].extend(effective)
        n = len(effective)
        return self._ok(RecordsIngested={"Total": n, "MemoryStore": n, "MagneticStore": 0})

    # -- misc -----------------------------------------------------------------

    def get_paginator(self, operation_name):
        return FakePaginator(self, operation_name)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_transport():
    """An empty in-memory timestream-write service."""
    return FakeTimestreamWrite()


@pytest.fixture
def admin_client(fake_transport):
    """TimeSeriesAdminClient wired to the fake transport."""
    return TimeSeriesAdminClient(client=fake_transport)


@pytest.fixture
def sample_retention():
    """The 24 hour / 7 day retention used throughout the samples."""
    return RetentionProperties(memory_store_retention_hours=24, magnetic_store_retention_days=7)


@pytest.fixture
def sample_time_ms():
    """Sample epoch time in milliseconds (2025-01-01 12:00 UTC)."""
    return int(datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture
def sample_database():
    return "sampleDB"


@pytest.fixture
def sample_table():
    return "sampleTable"


@pytest.fixture
def service_error():
    """Factory for service ClientErrors: service_error(code, message, operation, status=400)."""
    return client_error
