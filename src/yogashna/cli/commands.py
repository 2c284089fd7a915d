"""CLI commands for the Yogashna service.

Commands:
- init-db, seed: prepare the SQLite database
- serve: run the Web API with uvicorn
- import-videos, rollback-import, verify-import: video asset metadata import
- set-subscription, set-practice: adjust a user's plan and cycle settings
- abhyasa: print a personalized daily practice
"""

from pathlib import Path
from typing import get_args

import typer
from rich.console import Console
from rich.table import Table

from yogashna.config.app_config import load_app_config
from yogashna.core.abhyasa_generator import generate_todays_abhyasa
from yogashna.core.practice_preferences import (
    BEST_TIMES,
    PRACTICE_LEVELS,
    SESSION_LENGTHS,
    WELLNESS_FOCUSES,
    PracticePreferences,
)
from yogashna.core.subscription_policy import SubscriptionPlan
from yogashna.core.video_import import (
    ImportSummary,
    MissingSheetError,
    find_imported_assets,
    import_rows,
    read_rows,
    rollback_import,
    verify_import,
)
from yogashna.db.database import init_db
from yogashna.db.seed import seed_database
from yogashna.db.users_repository import (
    get_or_create_user,
    upsert_practice_preferences_record,
    upsert_subscription,
)

app = typer.Typer(
    name="yogashna",
    help="Backend service for guided yoga practice.",
    no_args_is_help=True,
)

console = Console()

SUBSCRIPTION_TIERS: tuple[str, ...] = get_args(SubscriptionPlan)


def _init_database(db: str | None) -> Path:
    """Initialize the database at --db or the configured path."""
    db_path = Path(db) if db else Path(load_app_config().database.path)
    init_db(db_path)
    return db_path


def _check_choice(value: str | None, allowed: tuple[str, ...], option: str) -> None:
    if value is not None and value not in allowed:
        console.print(f"[red]✗ Invalid {option}: {value}[/red]")
        console.print(f"  Choose one of: {', '.join(allowed)}")
        raise typer.Exit(code=1)


def _print_import_summary(summary: ImportSummary, show_hint: bool = True) -> None:
    if summary.validation_errors:
        console.print(f"[red]✗ {len(summary.validation_errors)} validation error(s)[/red]")
        for issue in summary.validation_errors:
            console.print(f"  row {issue.row} [dim]{issue.field}:[/dim] {issue.message}")
        return

    mode = "Dry run" if summary.dry_run else "Import"
    console.print(f"[green]✓ {mode} finished for import_date_{summary.import_date}[/green]")
    for result in summary.results:
        console.print(f"  [dim]{result.action}:[/dim] {result.stream_uid}  {result.title}")
        if result.error:
            console.print(f"    [red]{result.error}[/red]")
    console.print(f"  [dim]inserted:[/dim] {summary.inserted}")
    console.print(f"  [dim]updated:[/dim]  {summary.updated}")
    console.print(f"  [dim]failed:[/dim]   {summary.failed}")
    if summary.dry_run and show_hint:
        console.print("[yellow]⚠ Nothing was written. Re-run with --apply to import.[/yellow]")


# =============================================================================
# DATABASE
# =============================================================================


@app.command(name="init-db")
def init_db_command(
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Create the database schema if it does not exist."""
    db_path = _init_database(db)
    console.print("[green]✓ Database ready[/green]")
    console.print(f"  [dim]path:[/dim] {db_path}")


@app.command()
def seed(
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Insert catalog, program and video asset seed data."""
    _init_database(db)
    inserted = seed_database()

    console.print("[green]✓ Seed data applied[/green]")
    for table, count in inserted.items():
        console.print(f"  [dim]{table}:[/dim] {count}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    config = load_app_config()
    uvicorn.run(
        "yogashna.web.api:app",
        host=host or config.server.host,
        port=port or config.server.port,
        reload=reload,
    )


# =============================================================================
# VIDEO IMPORT
# =============================================================================


@app.command(name="import-videos")
def import_videos(
    file: str = typer.Argument(..., help="Import template (.xlsx) or CSV export"),
    dry_run: bool = typer.Option(
        True, "--dry-run/--apply", help="Only report planned changes (default)"
    ),
    import_date: str | None = typer.Option(
        None, "--date", help="Import date tag YYYY_MM_DD (default: today)"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Import video asset metadata, upserting by stream uid."""
    source_path = Path(file).expanduser().resolve()
    if not source_path.exists():
        console.print(f"[red]✗ File not found: {source_path}[/red]")
        raise typer.Exit(code=1)

    _init_database(db)
    try:
        rows = read_rows(source_path)
    except MissingSheetError as e:
        console.print(f"[red]✗ {e}[/red]")
        console.print(f"  Sheets: {', '.join(e.sheet_names) or '(none)'}")
        raise typer.Exit(code=1)

    if not dry_run and not yes:
        plan = import_rows(rows, dry_run=True, import_date=import_date)
        _print_import_summary(plan, show_hint=False)
        if plan.validation_errors:
            raise typer.Exit(code=1)
        console.print("[yellow]⚠ This will modify the database[/yellow]")
        if not typer.confirm("Continue with import?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    summary = import_rows(rows, dry_run=dry_run, import_date=import_date)
    _print_import_summary(summary)

    if summary.validation_errors or summary.failed:
        raise typer.Exit(code=1)


@app.command(name="rollback-import")
def rollback_import_command(
    import_date: str | None = typer.Argument(None, help="Import date YYYY_MM_DD"),
    all_imports: bool = typer.Option(False, "--all", help="Remove every imported asset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Delete the assets created by an import."""
    if import_date is None and not all_imports:
        console.print("[red]✗ Give an import date or --all[/red]")
        raise typer.Exit(code=1)

    _init_database(db)
    target = None if all_imports else import_date
    assets = find_imported_assets(target)
    if not assets:
        console.print("[green]✓ No imported assets to delete[/green]")
        return

    console.print(f"[bold]{len(assets)} asset(s) will be deleted:[/bold]")
    for asset in assets:
        console.print(f"  [red]•[/red] {asset.name} [dim]({asset.stream_uid})[/dim]")

    if not yes:
        if not typer.confirm(f"Delete {len(assets)} asset(s)?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    deleted = rollback_import(target)
    console.print(f"[green]✓ Deleted {deleted} imported asset(s)[/green]")


@app.command(name="verify-import")
def verify_import_command(
    import_date: str | None = typer.Argument(None, help="Import date YYYY_MM_DD"),
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Show the assets of an import and their counts."""
    _init_database(db)
    report = verify_import(import_date)

    if not report.assets:
        console.print("[yellow]⚠ No imported assets found[/yellow]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Stream UID")
    table.add_column("Category")
    table.add_column("Role")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    for asset in report.assets:
        table.add_row(
            asset.name,
            asset.stream_uid or "",
            asset.primary_category,
            asset.sequence_role,
            asset.status,
            f"{asset.duration_sec}s",
        )
    console.print(table)

    console.print(f"[green]✓ {len(report.assets)} imported asset(s)[/green]")
    for label, counts in (
        ("category", report.by_category),
        ("status", report.by_status),
        ("role", report.by_role),
    ):
        breakdown = ", ".join(f"{key}={value}" for key, value in sorted(counts.items()))
        console.print(f"  [dim]{label}:[/dim] {breakdown}")


# =============================================================================
# USERS
# =============================================================================


@app.command(name="set-subscription")
def set_subscription(
    firebase_uid: str = typer.Argument(..., help="Firebase uid of the user"),
    tier: str = typer.Option("PAID", "--tier", help="FREE or PAID"),
    active: bool = typer.Option(True, "--active/--inactive", help="Subscription state"),
    store: str | None = typer.Option(None, "--store", help="app_store, play_store or web"),
    entitlement: str | None = typer.Option(None, "--entitlement", help="Entitlement key"),
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Grant or change a user's subscription, creating the user if needed."""
    tier = tier.upper()
    _check_choice(tier, SUBSCRIPTION_TIERS, "tier")

    _init_database(db)
    user = get_or_create_user(firebase_uid)
    upsert_subscription(user.id, tier, active, store=store, entitlement=entitlement)

    state = "active" if active else "inactive"
    console.print(f"[green]✓ Subscription set:[/green] {tier} ({state})")
    console.print(f"  [dim]user:[/dim] {user.id}")


@app.command(name="set-practice")
def set_practice(
    firebase_uid: str = typer.Argument(..., help="Firebase uid of the user"),
    minutes: int | None = typer.Option(
        None, "--minutes", "-m", min=0, help="Minutes per cycle day"
    ),
    level: str | None = typer.Option(None, "--level", help="Asset level, e.g. BEGINNER"),
    db: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Set the minutes and level used when building cycle playlists."""
    _init_database(db)
    user = get_or_create_user(firebase_uid)
    upsert_practice_preferences_record(user.id, minutes, level.upper() if level else None)

    console.print("[green]✓ Practice settings saved[/green]")
    console.print(f"  [dim]minutes:[/dim] {minutes if minutes is not None else 'cycle default'}")
    console.print(f"  [dim]level:[/dim] {level.upper() if level else 'any'}")


# =============================================================================
# ABHYASA
# =============================================================================


@app.command()
def abhyasa(
    focus: str | None = typer.Option(None, "--focus", help="Wellness focus"),
    goal: list[str] = typer.Option([], "--goal", "-g", help="Goal (repeatable)"),
    level: str | None = typer.Option(None, "--level", help="Practice level"),
    length: str | None = typer.Option(None, "--length", help="Quick, Balanced or Deep"),
    time: str | None = typer.Option(None, "--time", help="Morning, Evening or Anytime"),
) -> None:
    """Print today's warm-up, main practice and cool-down."""
    _check_choice(focus, WELLNESS_FOCUSES, "focus")
    _check_choice(level, PRACTICE_LEVELS, "level")
    _check_choice(length, SESSION_LENGTHS, "length")
    _check_choice(time, BEST_TIMES, "time")

    defaults = PracticePreferences()
    preferences = PracticePreferences(
        focus=focus or defaults.focus,  # type: ignore[arg-type]
        goals=list(goal) or defaults.goals,
        level=level or defaults.level,  # type: ignore[arg-type]
        length=length or defaults.length,  # type: ignore[arg-type]
        time=time or defaults.time,  # type: ignore[arg-type]
    )

    items = generate_todays_abhyasa(preferences)
    total = sum(item.duration_min for item in items)
    console.print(f"[bold]Today's Abhyasa[/bold] ({total} min)")
    for item in items:
        console.print(
            f"  [green]{item.duration_min:>2} min[/green]  {item.title} "
            f"[dim]({item.sanskrit_title}, {item.style})[/dim]"
        )
        console.print(f"          [dim]{', '.join(item.focus_tags)}[/dim]")
