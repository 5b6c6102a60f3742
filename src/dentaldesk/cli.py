"""The dentaldesk CLI entrypoints."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import click
from click_default_group import DefaultGroup

from dentaldesk.auth import Session
from dentaldesk.backup import clear_all_data, export_backup, write_backup
from dentaldesk.database import MockDatabase
from dentaldesk.exceptions import DentalDeskError
from dentaldesk.faults import FaultPolicy, NoFaultPolicy, RandomFaultPolicy
from dentaldesk.records import PracticeRecords
from dentaldesk.reports import dashboard_summary
from dentaldesk.settings import SETTINGS, Settings
from dentaldesk.storage import JsonFileKeyValueStore
from dentaldesk.workflow import WorkflowSimulator


def _run(coro):
    try:
        return asyncio.run(coro)
    except DentalDeskError as e:
        raise click.ClickException(str(e)) from e


def fault_policy_from_settings(settings: Settings) -> RandomFaultPolicy:
    return RandomFaultPolicy(
        settings.dentaldesk_failure_rate,
        time_scale=settings.dentaldesk_time_scale,
    )


@dataclass
class AppContext:
    store: JsonFileKeyValueStore
    database: MockDatabase
    simulator: WorkflowSimulator

    def records(self) -> PracticeRecords:
        return PracticeRecords(self.database, self.simulator)


@click.group(cls=DefaultGroup, default="stats", default_if_no_args=True)
@click.option(
    "--storage",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="DENTALDESK_STORAGE_PATH",
    help="Storage file.",
)
@click.option(
    "--fast",
    is_flag=True,
    envvar="DENTALDESK_FAST",
    help="Skip simulated delays and failures.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level.")
@click.pass_context
def cli(ctx: click.Context, storage: Path | None, fast: bool, verbose: bool) -> None:
    """Manage the dental practice records store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else SETTINGS.dentaldesk_log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = JsonFileKeyValueStore(
        storage or SETTINGS.storage_path,
        quota_bytes=SETTINGS.dentaldesk_storage_quota_bytes,
    )
    policy: FaultPolicy = NoFaultPolicy() if fast else fault_policy_from_settings(SETTINGS)
    ctx.obj = AppContext(
        store=store,
        database=MockDatabase(store, fault_policy=policy),
        simulator=WorkflowSimulator(fault_policy=policy),
    )


@cli.command()
@click.pass_obj
def seed(app: AppContext) -> None:
    """Write the demo patients and incidents if the store is empty."""
    records = app.records()
    _run(records.load(seed=True))
    click.echo(f"{len(records.patients)} patients, {len(records.incidents)} incidents")


@cli.command()
@click.pass_obj
def stats(app: AppContext) -> None:
    """Print the dashboard summary."""
    records = app.records()
    _run(records.load(seed=False))
    summary = dashboard_summary(records.patients, records.incidents)

    click.echo(f"Patients:          {len(records.patients)}")
    click.echo(f"Completed:         {summary.completed_count}")
    click.echo(f"Pending:           {summary.pending_count}")
    click.echo(f"Revenue:           ${summary.total_revenue:.2f}")
    click.echo(f"Storage used:      {app.store.usage_bytes()} bytes")
    if summary.upcoming:
        click.echo("Upcoming:")
        for incident in summary.upcoming:
            click.echo(
                f"  {incident.appointment_date:%Y-%m-%d %H:%M}  {incident.title}"
            )


@cli.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def login(app: AppContext, email: str, password: str) -> None:
    """Sign in and remember the user in the store."""
    session = Session(app.database)
    if not _run(session.login(email, password)):
        raise click.ClickException("Invalid email or password")
    user = session.user
    click.echo(f"Signed in as {user.email} ({user.role.value})")


@cli.command()
@click.pass_obj
def logout(app: AppContext) -> None:
    """Forget the signed-in user."""
    Session(app.database).logout()
    click.echo("Signed out")


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=Path("."),
    show_default=True,
    help="File or directory to write the backup to.",
)
@click.pass_obj
def export(app: AppContext, output: Path) -> None:
    """Export patients and incidents as a JSON backup."""
    backup = _run(export_backup(app.database))
    try:
        path = write_backup(backup, output)
    except DentalDeskError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Wrote {path}")


@cli.command()
@click.pass_obj
def history(app: AppContext) -> None:
    """Load the records and print the resulting operation log."""
    _run(app.records().load(seed=False))
    for op in app.database.get_operation_history():
        status = "ok" if op.success else "FAILED"
        click.echo(
            f"{op.timestamp.isoformat()} {op.type.value:<6} {op.table.value:<9} "
            f"{status} {op.data or ''}"
        )


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def clear(app: AppContext, yes: bool) -> None:
    """Delete all stored patients, incidents and the saved session."""
    if not yes:
        click.confirm("Delete all stored data?", abort=True)
    clear_all_data(app.store)
    click.echo("All data cleared")


if __name__ == "__main__":
    cli()
