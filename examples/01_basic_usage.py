"""
Example 1: Basic Usage - CRUD and simple ingestion

This example demonstrates:
- Creating a database and a table with retention properties
- Describing and listing them
- Writing records, with and without common attributes
- Cleaning up
"""
import os
import time
from dotenv import load_dotenv

from timestream_admin import (
    Dimension,
    MeasureValueType,
    NotFound,
    Record,
    RetentionProperties,
    TimeSeriesAdminClient,
)

load_dotenv()

DATABASE_NAME = os.environ.get("TIMESTREAM_DATABASE", "devops")
TABLE_NAME = os.environ.get("TIMESTREAM_TABLE", "host_metrics")


def main():
    try:
        client = TimeSeriesAdminClient()
    except ValueError as e:
        print(f"ERROR: {e}")
        return

    print("=" * 60)
    print("Example 1: Basic Usage")
    print("=" * 60)

    with client:
        # Step 1: Database and table
        print("\n1. Creating database and table...")
        client.create_database(DATABASE_NAME)
        retention = RetentionProperties(memory_store_retention_hours=24, magnetic_store_retention_days=7)
        client.create_table(DATABASE_NAME, TABLE_NAME, retention)
        print(f"   ✓ {DATABASE_NAME}.{TABLE_NAME} ready")

        # Step 2: Describe and list
        print("\n2. Describing...")
        print(f"   Database ARN: {client.describe_database(DATABASE_NAME).arn}")
        table = client.describe_table(DATABASE_NAME, TABLE_NAME)
        print(f"   Table retention: {table.retention.memory_store_retention_hours}h memory, "
              f"{table.retention.magnetic_store_retention_days}d magnetic")
        print(f"   Databases: {[db.name for db in client.list_databases(page_size=2)]}")
        print(f"   Tables: {[t.name for t in client.list_tables(DATABASE_NAME, page_size=2)]}")

        # Step 3: Write records
        print("\n3. Writing records...")
        now = str(int(round(time.time() * 1000)))
        dimensions = (
            Dimension(name="region", value="us-east-1"),
            Dimension(name="az", value="az1"),
            Dimension(name="hostname", value="host1"),
        )
        result = client.write_records(DATABASE_NAME, TABLE_NAME, [
            Record(dimensions=dimensions, measure_name="cpu_utilization", measure_value="13.5",
                   measure_value_type=MeasureValueType.DOUBLE, time=now),
            Record(dimensions=dimensions, measure_name="memory_utilization", measure_value="40",
                   measure_value_type=MeasureValueType.DOUBLE, time=now),
        ])
        print(f"   ✓ Plain write: {result.outcome.value}")

        common = Record(dimensions=dimensions, measure_value_type=MeasureValueType.DOUBLE, time=now)
        result = client.write_records_with_common_attributes(DATABASE_NAME, TABLE_NAME, common, [
            Record(measure_name="cpu_utilization", measure_value="13.5"),
            Record(measure_name="memory_utilization", measure_value="40"),
        ])
        print(f"   ✓ Write with common attributes: {result.outcome.value}")

        # Step 4: Clean up
        print("\n4. Cleaning up...")
        client.delete_table(DATABASE_NAME, TABLE_NAME)
        client.delete_database(DATABASE_NAME)
        try:
            client.describe_database(DATABASE_NAME)
        except NotFound:
            print("   ✓ Database deleted")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
