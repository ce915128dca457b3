"""
Request and response models for timestream_admin.

All models are immutable pydantic models. Request models know how to render
themselves as keyword arguments for the boto3 ``timestream-write`` client via
``to_params()``; response models are built from service responses with
``from_response()``.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, StringConstraints, field_validator
from typing_extensions import Annotated

# Database and table names accepted by the service
ResourceName = Annotated[
    str, StringConstraints(min_length=1, max_length=256, pattern=r"^[a-zA-Z0-9_.\-]+$")
]

# Maximum number of records the service accepts in one WriteRecords call
MAX_RECORDS_PER_WRITE = 100


class MeasureValueType(str, Enum):
    DOUBLE = "DOUBLE"
    BIGINT = "BIGINT"
    VARCHAR = "VARCHAR"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"
    MULTI = "MULTI"


class TimeUnit(str, Enum):
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MICROSECONDS = "MICROSECONDS"
    NANOSECONDS = "NANOSECONDS"


def _to_wire_string(value: Any) -> Any:
    """Measure values and times travel as strings."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Records
# =============================================================================

class Dimension(_Frozen):
    """A named attribute identifying the series a record belongs to."""
    name: Annotated[str, StringConstraints(min_length=1, max_length=60)]
    value: str
    dimension_value_type: str = "VARCHAR"

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, v):
        return _to_wire_string(v)

    def to_params(self) -> Dict[str, str]:
        return {
            "Name": self.name,
            "Value": self.value,
            "DimensionValueType": self.dimension_value_type,
        }


class MeasureValue(_Frozen):
    """One named, typed value of a MULTI measure record."""
    name: str
    value: str
    type: MeasureValueType

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, v):
        return _to_wire_string(v)

    def to_params(self) -> Dict[str, str]:
        return {"Name": self.name, "Value": self.value, "Type": self.type.value}


class Record(_Frozen):
    """
    One time-series data point.

    Every field is optional so the same model serves as a record and as the
    common attributes template of a write batch. A record sent to the service
    must end up with a measure name, value(s) and time once merged with the
    common attributes.
    """
    dimensions: Tuple[Dimension, ...] = ()
    measure_name: Optional[str] = None
    measure_value: Optional[str] = None
    measure_value_type: Optional[MeasureValueType] = None
    measure_values: Tuple[MeasureValue, ...] = ()
    time: Optional[str] = None
    time_unit: Optional[TimeUnit] = None
    version: Optional[int] = None

    @field_validator("measure_value", "time", mode="before")
    @classmethod
    def _stringify(cls, v):
        return _to_wire_string(v)

    @field_validator("dimensions", mode="before")
    @classmethod
    def _dimensions_from_mapping(cls, v):
        # Accept {"region": "us-east-1", ...} as a shorthand
        if isinstance(v, dict):
            return tuple({"name": k, "value": val} for k, val in v.items())
        return v

    def merged_with(self, common: Optional["Record"]) -> "Record":
        """
        Return the effective record after applying common attributes.

        Record-specific values take precedence. Dimensions are merged by
        name: common dimensions come first, a record dimension with the same
        name replaces the common one.
        """
        if common is None:
            return self

        dims: Dict[str, Dimension] = {d.name: d for d in common.dimensions}
        for d in self.dimensions:
            dims[d.name] = d

        merged = {}
        for field in ("measure_name", "measure_value", "measure_value_type", "time", "time_unit", "version"):
            own = getattr(self, field)
            merged[field] = own if own is not None else getattr(common, field)

        return Record(
            dimensions=tuple(dims.values()),
            measure_values=self.measure_values or common.measure_values,
            **merged,
        )

    def to_params(self) -> Dict[str, Any]:
        """Render as a service Record dict, omitting unset fields."""
        params: Dict[str, Any] = {}
        if self.dimensions:
            params["Dimensions"] = [d.to_params() for d in self.dimensions]
        if self.measure_name is not None:
            params["MeasureName"] = self.measure_name
        if self.measure_value is not None:
            params["MeasureValue"] = self.measure_value
        if self.measure_value_type is not None:
            params["MeasureValueType"] = self.measure_value_type.value
        if self.measure_values:
            params["MeasureValues"] = [m.to_params() for m in self.measure_values]
        if self.time is not None:
            params["Time"] = self.time
        if self.time_unit is not None:
            params["TimeUnit"] = self.time_unit.value
        if self.version is not None:
            params["Version"] = self.version
        return params


class WriteBatch(_Frozen):
    """Records submitted together in one WriteRecords request."""
    records: Tuple[Record, ...] = Field(min_length=1, max_length=MAX_RECORDS_PER_WRITE)
    common_attributes: Optional[Record] = None

    def effective_records(self) -> List[Record]:
        """Records as the service will interpret them (common attributes applied)."""
        return [r.merged_with(self.common_attributes) for r in self.records]


# =============================================================================
# Retention & resource info
# =============================================================================

class RetentionProperties(_Frozen):
    """Retention windows for the memory store (hours) and magnetic store (days)."""
    memory_store_retention_hours: PositiveInt
    magnetic_store_retention_days: PositiveInt

    def to_params(self) -> Dict[str, int]:
        return {
            "MemoryStoreRetentionPeriodInHours": self.memory_store_retention_hours,
            "MagneticStoreRetentionPeriodInDays": self.magnetic_store_retention_days,
        }

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "RetentionProperties":
        return cls(
            memory_store_retention_hours=data["MemoryStoreRetentionPeriodInHours"],
            magnetic_store_retention_days=data["MagneticStoreRetentionPeriodInDays"],
        )


class DatabaseInfo(_Frozen):
    name: str
    arn: Optional[str] = None
    table_count: Optional[int] = None
    kms_key_id: Optional[str] = None
    creation_time: Optional[datetime] = None
    last_updated_time: Optional[datetime] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "DatabaseInfo":
        return cls(
            name=data["DatabaseName"],
            arn=data.get("Arn"),
            table_count=data.get("TableCount"),
            kms_key_id=data.get("KmsKeyId"),
            creation_time=data.get("CreationTime"),
            last_updated_time=data.get("LastUpdatedTime"),
        )


class TableInfo(_Frozen):
    database_name: str
    name: str
    arn: Optional[str] = None
    status: Optional[str] = None
    retention: Optional[RetentionProperties] = None
    creation_time: Optional[datetime] = None
    last_updated_time: Optional[datetime] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "TableInfo":
        retention = data.get("RetentionProperties")
        return cls(
            database_name=data["DatabaseName"],
            name=data["TableName"],
            arn=data.get("Arn"),
            status=data.get("TableStatus"),
            retention=RetentionProperties.from_response(retention) if retention else None,
            creation_time=data.get("CreationTime"),
            last_updated_time=data.get("LastUpdatedTime"),
        )


class WriteStatus(NamedTuple):
    """Result of a successful WriteRecords call."""
    status_code: int
    records_total: Optional[int] = None
    records_memory_store: Optional[int] = None
    records_magnetic_store: Optional[int] = None

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "WriteStatus":
        ingested = response.get("RecordsIngested") or {}
        return cls(
            status_code=status_code(response),
            records_total=ingested.get("Total"),
            records_memory_store=ingested.get("MemoryStore"),
            records_magnetic_store=ingested.get("MagneticStore"),
        )


def status_code(response: Dict[str, Any]) -> int:
    """HTTP status code of a service response."""
    return response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)


def _tags(tags: Optional[Dict[str, str]]) -> List[Dict[str, str]]:
    return [{"Key": k, "Value": v} for k, v in (tags or {}).items()]


# =============================================================================
# Requests
# =============================================================================

class CreateDatabaseRequest(_Frozen):
    database_name: ResourceName
    kms_key_id: Optional[str] = None
    tags: Optional[Dict[str, str]] = None

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"DatabaseName": self.database_name}
        if self.kms_key_id:
            params["KmsKeyId"] = self.kms_key_id
        if self.tags:
            params["Tags"] = _tags(self.tags)
        return params


class DatabaseRequest(_Frozen):
    """Describe or delete a database."""
    database_name: ResourceName

    def to_params(self) -> Dict[str, Any]:
        return {"DatabaseName": self.database_name}


class UpdateDatabaseRequest(_Frozen):
    database_name: ResourceName
    kms_key_id: Annotated[str, StringConstraints(min_length=1)]

    def to_params(self) -> Dict[str, Any]:
        return {"DatabaseName": self.database_name, "KmsKeyId": self.kms_key_id}


class ListDatabasesRequest(_Frozen):
    page_size: Annotated[int, Field(ge=1, le=20)] = 20


class TableRequest(_Frozen):
    """Describe or delete a table."""
    database_name: ResourceName
    table_name: ResourceName

    def to_params(self) -> Dict[str, Any]:
        return {"DatabaseName": self.database_name, "TableName": self.table_name}


class CreateTableRequest(TableRequest):
    retention: RetentionProperties
    tags: Optional[Dict[str, str]] = None

    def to_params(self) -> Dict[str, Any]:
        params = super().to_params()
        params["RetentionProperties"] = self.retention.to_params()
        if self.tags:
            params["Tags"] = _tags(self.tags)
        return params


class UpdateTableRequest(TableRequest):
    retention: RetentionProperties

    def to_params(self) -> Dict[str, Any]:
        params = super().to_params()
        params["RetentionProperties"] = self.retention.to_params()
        return params


class ListTablesRequest(_Frozen):
    database_name: ResourceName
    page_size: Annotated[int, Field(ge=1, le=20)] = 20


class WriteRecordsRequest(TableRequest):
    batch: WriteBatch

    def to_params(self) -> Dict[str, Any]:
        params = super().to_params()
        params["Records"] = [r.to_params() for r in self.batch.records]
        if self.batch.common_attributes is not None:
            params["CommonAttributes"] = self.batch.common_attributes.to_params()
        return params
