"""Tests for writing records, with and without common attributes."""
import pytest
from pydantic import ValidationError

from timestream_admin import (
    Dimension,
    MeasureValue,
    MeasureValueType,
    NotFound,
    Outcome,
    Record,
    RejectedRecords,
    TimeUnit,
    WriteBatch,
)


@pytest.fixture
def with_table(admin_client, sample_database, sample_table, sample_retention):
    admin_client.create_database(sample_database)
    admin_client.create_table(sample_database, sample_table, sample_retention)
    return sample_database, sample_table


@pytest.fixture
def host_dimensions():
    return (
        Dimension(name="region", value="us-east-1"),
        Dimension(name="az", value="az1"),
        Dimension(name="hostname", value="host1"),
    )


# =============================================================================
# Common attribute merge
# =============================================================================

def test_common_attributes_merge(sample_time_ms):
    """Test both records inherit type and time from the common attributes."""
    common = Record(measure_value_type=MeasureValueType.DOUBLE, time=sample_time_ms)
    batch = WriteBatch(
        records=(
            Record(measure_name="cpu", measure_value="13.5"),
            Record(measure_name="mem", measure_value="40"),
        ),
        common_attributes=common,
    )

    effective = batch.effective_records()

    assert [(r.measure_name, r.measure_value) for r in effective] == [("cpu", "13.5"), ("mem", "40")]
    assert all(r.measure_value_type is MeasureValueType.DOUBLE for r in effective)
    assert all(r.time == str(sample_time_ms) for r in effective)


def test_record_values_take_precedence(host_dimensions):
    """Test record-specific values and dimensions override the common ones."""
    common = Record(dimensions=host_dimensions, measure_value_type=MeasureValueType.DOUBLE, time="1")
    record = Record(
        dimensions=(Dimension(name="hostname", value="host2"), Dimension(name="rack", value="r7")),
        measure_name="connections",
        measure_value="12",
        measure_value_type=MeasureValueType.BIGINT,
    )

    merged = record.merged_with(common)

    assert merged.measure_value_type is MeasureValueType.BIGINT
    assert merged.time == "1"
    assert [(d.name, d.value) for d in merged.dimensions] == [
        ("region", "us-east-1"), ("az", "az1"), ("hostname", "host2"), ("rack", "r7"),
    ]


def test_merge_without_common_is_identity():
    record = Record(measure_name="cpu", measure_value="1", time="1")
    assert record.merged_with(None) is record


def test_batch_limits():
    """Test a batch holds between 1 and 100 records."""
    with pytest.raises(ValidationError):
        WriteBatch(records=())
    with pytest.raises(ValidationError):
        WriteBatch(records=tuple(Record(measure_name="m", measure_value=i, time="1") for i in range(101)))


def test_record_shorthands():
    """Test numeric values are sent as strings and dimension dicts are accepted."""
    record = Record(dimensions={"hostname": "host1"}, measure_name="up", measure_value=True, time=1700000000)

    assert record.to_params() == {
        "Dimensions": [{"Name": "hostname", "Value": "host1", "DimensionValueType": "VARCHAR"}],
        "MeasureName": "up",
        "MeasureValue": "true",
        "Time": "1700000000",
    }


def test_record_is_immutable():
    record = Record(measure_name="cpu")
    with pytest.raises(ValidationError):
        record.measure_name = "mem"


# =============================================================================
# write_records
# =============================================================================

def test_write_records(admin_client, fake_transport, with_table, host_dimensions, sample_time_ms):
    """Test a full batch is written and the status reported."""
    db, table = with_table
    records = [
        Record(dimensions=host_dimensions, measure_name="cpu_utilization", measure_value="13.5",
               measure_value_type=MeasureValueType.DOUBLE, time=sample_time_ms),
        Record(dimensions=host_dimensions, measure_name="memory_utilization", measure_value="40",
               measure_value_type=MeasureValueType.DOUBLE, time=sample_time_ms),
    ]

    result = admin_client.write_records(db, table, records)

    assert result.outcome is Outcome.WRITTEN
    assert result.value.status_code == 200
    assert result.value.records_total == 2
    rows = fake_transport.rows[(db, table)]
    assert [r["MeasureName"] for r in rows] == ["cpu_utilization", "memory_utilization"]
    assert fake_transport.calls_to("write_records")[0]["CommonAttributes"] is None


def test_write_records_accepts_dicts(admin_client, fake_transport, with_table):
    """Test plain dicts are validated into records."""
    db, table = with_table

    result = admin_client.write_records(db, table, [
        {"dimensions": {"hostname": "host1"}, "measure_name": "cpu", "measure_value": 1.5,
         "measure_value_type": "DOUBLE", "time": "1700000000000"},
    ])

    assert result.ok
    assert fake_transport.rows[(db, table)][0]["MeasureValue"] == "1.5"


def test_write_records_with_common_attributes(admin_client, fake_transport, with_table, sample_time_ms):
    """Test the service receives the template once and stores two complete records."""
    db, table = with_table
    common = {"dimensions": {"region": "us-east-1", "az": "az1", "hostname": "host1"},
              "measure_value_type": "DOUBLE", "time": sample_time_ms}
    records = [
        Record(measure_name="cpu", measure_value="13.5"),
        Record(measure_name="mem", measure_value="40"),
    ]

    result = admin_client.write_records_with_common_attributes(db, table, common, records)

    assert result.outcome is Outcome.WRITTEN
    sent = fake_transport.calls_to("write_records")[0]
    assert sent["CommonAttributes"]["MeasureValueType"] == "DOUBLE"
    assert "Time" not in sent["Records"][0]

    rows = fake_transport.rows[(db, table)]
    assert [(r["MeasureName"], r["MeasureValue"]) for r in rows] == [("cpu", "13.5"), ("mem", "40")]
    assert all(r["MeasureValueType"] == "DOUBLE" and r["Time"] == str(sample_time_ms) for r in rows)
    assert all(len(r["Dimensions"]) == 3 for r in rows)


def test_write_multi_measure_record(admin_client, fake_transport, with_table, sample_time_ms):
    """Test MULTI records send their measure values."""
    db, table = with_table
    record = Record(
        dimensions={"hostname": "host1"},
        measure_name="metrics",
        measure_value_type=MeasureValueType.MULTI,
        measure_values=(
            MeasureValue(name="cpu", value=13.5, type=MeasureValueType.DOUBLE),
            MeasureValue(name="mem", value=40, type=MeasureValueType.BIGINT),
        ),
        time=sample_time_ms // 1000,
        time_unit=TimeUnit.SECONDS,
    )

    result = admin_client.write_records(db, table, [record])

    assert result.ok
    row = fake_transport.rows[(db, table)][0]
    assert row["TimeUnit"] == "SECONDS"
    assert row["MeasureValues"] == [
        {"Name": "cpu", "Value": "13.5", "Type": "DOUBLE"},
        {"Name": "mem", "Value": "40", "Type": "BIGINT"},
    ]


def test_write_to_missing_table_is_suppressed(admin_client, sample_database):
    """Test write failures are returned, not raised."""
    admin_client.create_database(sample_database)

    result = admin_client.write_records(sample_database, "missingTable", [
        Record(measure_name="cpu", measure_value="1", time="1"),
    ])

    assert result.outcome is Outcome.FAILED
    assert isinstance(result.error, NotFound)
    with pytest.raises(NotFound):
        result.unwrap()


def test_rejected_records_are_reported(admin_client, fake_transport, with_table):
    """Test rejected records surface as RejectedRecords with the service details."""
    db, table = with_table

    result = admin_client.write_records(db, table, [
        Record(measure_name="cpu", measure_value="1", time="1"),
        Record(measure_value="2"),
    ])

    assert result.outcome is Outcome.FAILED
    assert isinstance(result.error, RejectedRecords)
    assert result.error.rejected[0]["RecordIndex"] == 1
    assert fake_transport.rows[(db, table)] == []
