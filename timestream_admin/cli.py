"""
timestream-admin CLI - Command line interface for Timestream administration.

Provides administrative and ingestion commands:
- database: create / describe / list / update / delete databases
- table: create / describe / list / update / delete tables
- write: write sample host metrics
- sample: run the full CRUD and ingestion walkthrough

Environment:
    - TIMESTREAM_REGION or AWS_REGION: AWS region
    - AWS_PROFILE: AWS profile to use
    - TIMESTREAM_DATABASE / TIMESTREAM_TABLE: default database and table
    - TIMESTREAM_KMS_KEY_ID: KMS key for `database update`
    - Typical usage: timestream-admin --help

Examples:
    # Create a database and a table
    $ timestream-admin database create --database devops
    $ timestream-admin table create --database devops --table host_metrics --memory-hours 24 --magnetic-days 7

    # Write sample records using common attributes
    $ timestream-admin write --database devops --table host_metrics --common-attributes

    # Run everything, then clean up
    $ timestream-admin sample --database devops --table host_metrics --cleanup
"""
import time
from typing import List, Optional
from typing_extensions import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .errors import AdminError, AdminResult, Outcome
from .log import setup_logging
from .models import DatabaseInfo, Dimension, MeasureValueType, Record, RetentionProperties, TableInfo
from .sdk import TimeSeriesAdminClient

# Retention used by the sample walkthrough
HT_TTL_HOURS = 24
CT_TTL_DAYS = 7

# Initialize Typer apps
app = typer.Typer(
    help="timestream-admin CLI - Manage Timestream databases, tables and records",
    rich_markup_mode="rich",
)
database_app = typer.Typer(help="Manage databases")
table_app = typer.Typer(help="Manage tables")

app.add_typer(database_app, name="database")
app.add_typer(table_app, name="table")

# Rich console for formatted output
console = Console()

DatabaseOpt = Annotated[str, typer.Option("--database", "-d", envvar="TIMESTREAM_DATABASE", help="Database name (or set TIMESTREAM_DATABASE)")]
TableOpt = Annotated[str, typer.Option("--table", "-t", envvar="TIMESTREAM_TABLE", help="Table name (or set TIMESTREAM_TABLE)")]
PageSizeOpt = Annotated[int, typer.Option("--page-size", min=1, max=20, help="Items fetched per request")]
MemoryHoursOpt = Annotated[int, typer.Option("--memory-hours", min=1, help="Memory store retention in hours")]
MagneticDaysOpt = Annotated[int, typer.Option("--magnetic-days", min=1, help="Magnetic store retention in days")]


@app.callback()
def main(
    ctx: typer.Context,
    region: Annotated[Optional[str], typer.Option("--region", "-r", envvar=["TIMESTREAM_REGION", "AWS_REGION"], help="AWS region (or set TIMESTREAM_REGION/AWS_REGION)")] = None,
    profile: Annotated[Optional[str], typer.Option("--profile", "-p", envvar="AWS_PROFILE", help="AWS profile")] = None,
    log_level: Annotated[str, typer.Option("--log-level", envvar="TIMESTREAM_LOG_LEVEL", help="DEBUG, INFO, WARNING, ERROR")] = "INFO",
    log_format: Annotated[str, typer.Option("--log-format", envvar="TIMESTREAM_LOG_FORMAT", help="text or json")] = "text",
):
    """Manage Amazon Timestream databases, tables and records."""
    try:
        setup_logging(log_level, log_format)
    except ValueError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        raise typer.Exit(2)
    ctx.obj = {"region": region, "profile": profile}


def get_client(ctx: typer.Context) -> TimeSeriesAdminClient:
    """Build the admin client from the global options."""
    opts = ctx.obj or {}
    try:
        return TimeSeriesAdminClient(region_name=opts.get("region"), profile_name=opts.get("profile"))
    except ValueError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        raise typer.Exit(2)


def _fail(exc: Exception, code: int = 1):
    console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
    raise typer.Exit(code)


def _report(result: AdminResult, what: str) -> None:
    """Print the outcome of a non-raising operation; exit 1 if it failed."""
    if result.outcome is Outcome.FAILED:
        _fail(result.error)
    if result.outcome in (Outcome.SKIPPED, Outcome.ALREADY_EXISTS):
        reason = f" ({escape(result.error.message)})" if result.error is not None else ""
        console.print(f"[yellow]-[/yellow] {escape(what)}: {result.outcome.value}{reason}")
    else:
        console.print(f"[green]✓[/green] {escape(what)}: {result.outcome.value}")


def _database_table(databases: List[DatabaseInfo]) -> Table:
    table = Table(title="Databases")
    table.add_column("Name", style="cyan")
    table.add_column("Tables", justify="right")
    table.add_column("KMS key")
    table.add_column("ARN", style="dim")
    for db in databases:
        table.add_row(db.name, str(db.table_count or 0), db.kms_key_id or "", db.arn or "")
    return table


def _tables_table(tables: List[TableInfo]) -> Table:
    table = Table(title="Tables")
    table.add_column("Database", style="cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Memory (h)", justify="right")
    table.add_column("Magnetic (d)", justify="right")
    for t in tables:
        retention = t.retention
        table.add_row(
            t.database_name, t.name, t.status or "",
            str(retention.memory_store_retention_hours) if retention else "",
            str(retention.magnetic_store_retention_days) if retention else "",
        )
    return table


# =============================================================================
# Sample records
# =============================================================================

def host_dimensions() -> List[Dimension]:
    return [
        Dimension(name="region", value="us-east-1"),
        Dimension(name="az", value="az1"),
        Dimension(name="hostname", value="host1"),
    ]


def sample_records(now_ms: Optional[int] = None) -> List[Record]:
    """cpu/memory utilization records carrying all their attributes."""
    now = str(now_ms if now_ms is not None else int(round(time.time() * 1000)))
    dims = tuple(host_dimensions())
    return [
        Record(dimensions=dims, measure_name="cpu_utilization", measure_value="13.5",
               measure_value_type=MeasureValueType.DOUBLE, time=now),
        Record(dimensions=dims, measure_name="memory_utilization", measure_value="40",
               measure_value_type=MeasureValueType.DOUBLE, time=now),
    ]


def sample_common_attributes(now_ms: Optional[int] = None):
    """The same records split into common attributes and per-record measures."""
    now = str(now_ms if now_ms is not None else int(round(time.time() * 1000)))
    common = Record(dimensions=tuple(host_dimensions()), measure_value_type=MeasureValueType.DOUBLE, time=now)
    records = [
        Record(measure_name="cpu_utilization", measure_value="13.5"),
        Record(measure_name="memory_utilization", measure_value="40"),
    ]
    return common, records


# =============================================================================
# Database Commands
# =============================================================================

@database_app.command("create")
def database_create(
    ctx: typer.Context,
    database: DatabaseOpt,
    kms_key_id: Annotated[Optional[str], typer.Option("--kms-key-id", help="KMS key used to encrypt the database")] = None,
):
    """
    Create a database. An existing database is left untouched.

    Examples:
        timestream-admin database create --database devops
    """
    client = get_client(ctx)
    try:
        result = client.create_database(database, kms_key_id=kms_key_id)
    except (AdminError, ValueError) as e:
        _fail(e)
    _report(result, f"Database [{database}]")


@database_app.command("describe")
def database_describe(ctx: typer.Context, database: DatabaseOpt):
    """Show a database's ARN, table count and KMS key."""
    client = get_client(ctx)
    try:
        info = client.describe_database(database)
    except (AdminError, ValueError) as e:
        _fail(e)
    console.print(_database_table([info]))


@database_app.command("list")
def database_list(ctx: typer.Context, page_size: PageSizeOpt = 20):
    """List all databases in the region."""
    client = get_client(ctx)
    try:
        databases = list(client.list_databases(page_size=page_size))
    except (AdminError, ValueError) as e:
        _fail(e)
    console.print(_database_table(databases))


@database_app.command("update")
def database_update(
    ctx: typer.Context,
    database: DatabaseOpt,
    kms_key_id: Annotated[Optional[str], typer.Option("--kms-key-id", envvar="TIMESTREAM_KMS_KEY_ID", help="New KMS key (skipped when not given)")] = None,
):
    """
    Replace the KMS key of a database.

    Without --kms-key-id (or TIMESTREAM_KMS_KEY_ID) nothing is sent.
    """
    client = get_client(ctx)
    try:
        result = client.update_database(database, kms_key_id=kms_key_id)
    except ValueError as e:
        _fail(e)
    _report(result, f"Database [{database}] update")


@database_app.command("delete")
def database_delete(
    ctx: typer.Context,
    database: DatabaseOpt,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt (use with caution!)")] = False,
):
    """
    Delete a database.

    [bold red]⚠️  WARNING: This is DESTRUCTIVE[/bold red]

    The database must not contain tables.
    """
    if not yes:
        console.print(Panel(
            f"[bold red]WARNING: This will delete database {escape(database)}![/bold red]",
            title="Destructive Operation",
            border_style="red",
        ))
        if not typer.confirm("\nAre you sure? This cannot be undone.", default=False):
            console.print("[yellow]Aborted.[/yellow]")
            return

    client = get_client(ctx)
    try:
        result = client.delete_database(database)
    except (AdminError, ValueError) as e:
        _fail(e)
    _report(result, f"Database [{database}]")


# =============================================================================
# Table Commands
# =============================================================================

@table_app.command("create")
def table_create(
    ctx: typer.Context,
    database: DatabaseOpt,
    table: TableOpt,
    memory_hours: MemoryHoursOpt = HT_TTL_HOURS,
    magnetic_days: MagneticDaysOpt = CT_TTL_DAYS,
):
    """
    Create a table. An existing table is left untouched.

    Examples:
        timestream-admin table create -d devops -t host_metrics --memory-hours 24 --magnetic-days 7
    """
    client = get_client(ctx)
    try:
        retention = RetentionProperties(
            memory_store_retention_hours=memory_hours, magnetic_store_retention_days=magnetic_days,
        )
        result = client.create_table(database, table, retention)
    except (AdminError, ValueError) as e:
        _fail(e)
    _report(result, f"Table [{database}.{table}]")


@table_app.command("update")
def table_update(
    ctx: typer.Context,
    database: DatabaseOpt,
    table: TableOpt,
    memory_hours: MemoryHoursOpt = HT_TTL_HOURS,
    magnetic_days: MagneticDaysOpt = CT_TTL_DAYS,
):
    """Replace the retention properties of a table."""
    client = get_client(ctx)
    try:
        retention = RetentionProperties(
            memory_store_retention_hours=memory_hours, magnetic_store_retention_days=magnetic_days,
        )
        result = client.update_table(database, table, retention)
    except (AdminError, ValueError) as e:
        _fail(e)
    _report(result, f"Table [{database}.{table}]")


@table_app.command("describe")
def table_describe(ctx: typer.Context, database: DatabaseOpt, table: TableOpt):
    """Show a table's status and retention."""
    client = get_client(ctx)
    try:
        info = client.describe_table(database, table)
    except (AdminError, ValueError) as e:
        _fail(e)
    console.print(_tables_table([info]))


@table_app.command("list")
def table_list(ctx: typer.Context, database: DatabaseOpt, page_size: PageSizeOpt = 20):
    """List the tables of a database."""
    client = get_client(ctx)
    try:
        tables = list(client.list_tables(database, page_size=page_size))
    except (AdminError, ValueError) as e:
        _fail(e)
    console.print(_tables_table(tables))


@table_app.command("delete")
def table_delete(
    ctx: typer.Context,
    database: DatabaseOpt,
    table: TableOpt,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt (use with caution!)")] = False,
):
    """
    Delete a table and all its data.

    [bold red]⚠️  WARNING: This is DESTRUCTIVE[/bold red]
    """
    if not yes:
        if not typer.confirm(f"Delete table [{database}.{table}]? This cannot be undone.", default=False):
            console.print("[yellow]Aborted.[/yellow]")
            return

    client = get_client(ctx)
    try:
        result = client.delete_table(database, table)
    except (AdminError, ValueError) as e:
        _fail(e)
    _report(result, f"Table [{database}.{table}]")


# =============================================================================
# Ingestion Commands
# =============================================================================

@app.command()
def write(
    ctx: typer.Context,
    database: DatabaseOpt,
    table: TableOpt,
    common_attributes: Annotated[bool, typer.Option("--common-attributes/--no-common-attributes", help="Send shared dimensions/type/time once as common attributes")] = False,
):
    """
    Write sample cpu/memory utilization records for host1 at the current time.
    """
    client = get_client(ctx)
    try:
        if common_attributes:
            common, records = sample_common_attributes()
            result = client.write_records_with_common_attributes(database, table, common, records)
        else:
            result = client.write_records(database, table, sample_records())
    except ValueError as e:
        _fail(e)
    _report(result, "WriteRecords")
    if result.value is not None:
        console.print(f"  Status: [cyan]{result.value.status_code}[/cyan]")


@app.command()
def sample(
    ctx: typer.Context,
    database: DatabaseOpt,
    table: TableOpt,
    kms_key_id: Annotated[Optional[str], typer.Option("--kms-key-id", envvar="TIMESTREAM_KMS_KEY_ID", help="KMS key for the update-database step")] = None,
    cleanup: Annotated[bool, typer.Option("--cleanup/--no-cleanup", help="Delete the table and database at the end")] = False,
):
    """
    Run the CRUD and simple ingestion walkthrough.

    Creates, describes, lists and updates the database and table, writes
    records with and without common attributes and, with --cleanup,
    deletes the table and the database.
    """
    client = get_client(ctx)
    retention = RetentionProperties(
        memory_store_retention_hours=HT_TTL_HOURS, magnetic_store_retention_days=CT_TTL_DAYS,
    )
    try:
        _report(client.create_database(database), f"Database [{database}]")
        client.describe_database(database)
        console.print(_database_table(list(client.list_databases(page_size=2))))
        _report(client.update_database(database, kms_key_id), f"Database [{database}] update")

        _report(client.create_table(database, table, retention), f"Table [{database}.{table}]")
        client.describe_table(database, table)
        console.print(_tables_table(list(client.list_tables(database, page_size=2))))
        _report(client.update_table(database, table, retention), f"Table [{database}.{table}]")

        for result in (
            client.write_records(database, table, sample_records()),
            client.write_records_with_common_attributes(database, table, *sample_common_attributes()),
        ):
            if result.ok:
                console.print(f"[green]✓[/green] WriteRecords status: {result.value.status_code}")
            else:
                console.print(f"[red]✗[/red] WriteRecords failed: {escape(str(result.error))}")

        if cleanup:
            _report(client.delete_table(database, table), f"Table [{database}.{table}]")
            _report(client.delete_database(database), f"Database [{database}]")
    except (AdminError, ValueError) as e:
        _fail(e)

    console.print("\n[bold green]Sample completed successfully![/bold green]")


if __name__ == "__main__":
    app()
