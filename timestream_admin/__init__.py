"""
timestream_admin - Database/table administration and record ingestion for Amazon Timestream.

Quick usage:
    import timestream_admin as ta

    ta.create_database('devops')
    ta.create_table('devops', 'host_metrics',
                    ta.RetentionProperties(memory_store_retention_hours=24,
                                           magnetic_store_retention_days=7))
    ta.write_records('devops', 'host_metrics', records)

Explicit client usage (for custom transport settings):
    from timestream_admin import TimeSeriesAdminClient

    client = TimeSeriesAdminClient(region_name='eu-west-1', profile_name='ops')
    for db in client.list_databases(page_size=5):
        print(db.name)
"""

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())

from .sdk import TimeSeriesAdminClient
from .errors import (
    AdminError,
    AdminResult,
    AlreadyExists,
    GenericFailure,
    NotFound,
    Outcome,
    RejectedRecords,
)
from .models import (
    DatabaseInfo,
    Dimension,
    MeasureValue,
    MeasureValueType,
    Record,
    RetentionProperties,
    TableInfo,
    TimeUnit,
    WriteBatch,
    WriteStatus,
)

# ---------------------------------------------------------------------------
# Lazy default client & module-level convenience functions
# ---------------------------------------------------------------------------

_default_client = None


def _get_default_client():
    """Get or create the default TimeSeriesAdminClient (lazy singleton)."""
    global _default_client
    if _default_client is None:
        _default_client = TimeSeriesAdminClient()
    return _default_client


def create_database(database_name, kms_key_id=None):
    """Create a database. See :meth:`TimeSeriesAdminClient.create_database`."""
    return _get_default_client().create_database(database_name, kms_key_id=kms_key_id)


def delete_database(database_name):
    """Delete a database. See :meth:`TimeSeriesAdminClient.delete_database`."""
    return _get_default_client().delete_database(database_name)


def create_table(database_name, table_name, retention):
    """Create a table. See :meth:`TimeSeriesAdminClient.create_table`."""
    return _get_default_client().create_table(database_name, table_name, retention)


def delete_table(database_name, table_name):
    """Delete a table. See :meth:`TimeSeriesAdminClient.delete_table`."""
    return _get_default_client().delete_table(database_name, table_name)


def write_records(database_name, table_name, records, common_attributes=None):
    """Write one batch of records. See :meth:`TimeSeriesAdminClient.write_records`."""
    client = _get_default_client()
    if common_attributes is not None:
        return client.write_records_with_common_attributes(
            database_name, table_name, common_attributes, records,
        )
    return client.write_records(database_name, table_name, records)


__all__ = [
    'TimeSeriesAdminClient',
    'AdminError',
    'AdminResult',
    'AlreadyExists',
    'GenericFailure',
    'NotFound',
    'Outcome',
    'RejectedRecords',
    'DatabaseInfo',
    'Dimension',
    'MeasureValue',
    'MeasureValueType',
    'Record',
    'RetentionProperties',
    'TableInfo',
    'TimeUnit',
    'WriteBatch',
    'WriteStatus',
    'create_database',
    'delete_database',
    'create_table',
    'delete_table',
    'write_records',
]
