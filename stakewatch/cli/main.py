"""Main CLI entry point."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="stakewatch",
    help="Indexer staking ledger CLI",
    add_completion=False,
)

console = Console()


@app.command("init-db")
def init_db(
    force: bool = typer.Option(False, "--force", "-f", help="Drop and recreate tables"),
):
    """Initialize the database schema."""
    from db.connection import init_database

    with console.status("Initializing database..."):
        created = init_database(drop_existing=force)

    if force:
        console.print("[yellow]Dropped existing tables[/yellow]")
    console.print(f"[green]Database initialized successfully[/green] ({len(created)} tables created)")


@app.command()
def replay(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON Lines event file"),
    fail_on_error: bool = typer.Option(False, "--fail-on-error", help="Stop on first error"),
):
    """Replay recorded events through the ledger."""
    from config import get_settings
    from db.connection import get_session, init_database
    from stakewatch.services.errors import ReplayError
    from stakewatch.services.replay import EventReplayService

    settings = get_settings()
    init_database()

    with get_session() as session:
        service = EventReplayService(
            session,
            constants=settings.protocol.constants(),
            badges_enabled=settings.badges_enabled,
        )
        try:
            with console.status(f"Replaying {file}..."):
                result = service.replay_file(file, fail_on_error=fail_on_error)
        except ReplayError as e:
            console.print(f"[red]Replay stopped:[/red] {e}")
            raise typer.Exit(code=1)

    table = Table(title="Replay Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Run ID", result.run_id)
    table.add_row("Events Processed", str(result.events_processed))
    table.add_row("Events Failed", str(result.events_failed))
    table.add_row("Indexers Touched", str(result.indexers_touched))
    table.add_row("Badges Awarded", str(result.badges_awarded))
    if result.block_range:
        table.add_row("Block Range", f"{result.block_range[0]} - {result.block_range[1]}")

    console.print(table)

    if result.errors:
        console.print("\n[red]Errors:[/red]")
        for err in result.errors[:5]:
            console.print(f"  {err}")
        if len(result.errors) > 5:
            console.print(f"  ... and {len(result.errors) - 5} more")


@app.command()
def indexer(address: str = typer.Argument(..., help="Indexer address")):
    """Show the current ledger state of one indexer."""
    from db.connection import get_session
    from stakewatch.services.queries import IndexerQueryService

    with get_session() as session:
        svc = IndexerQueryService(session)
        data = svc.get_indexer(address)
        badges = svc.list_badges(address) if data else []

    if not data:
        console.print(f"[yellow]Indexer {address} not found[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"Indexer {data['id']}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green", justify="right")

    for key, value in data.items():
        if key == "id":
            continue
        table.add_row(key, "-" if value is None else str(value))

    console.print(table)

    if badges:
        console.print("\n[bold]Badges:[/bold]")
        for b in badges:
            console.print(f"  #{b['badgeNumber']} {b['badgeType']} at block {b['awardedAtBlock']}")


@app.command()
def snapshots(
    address: str = typer.Argument(..., help="Indexer address"),
    limit: int = typer.Option(30, "--limit", "-n", help="Number of day-buckets to show"),
):
    """Show the most recent daily snapshots of one indexer."""
    from db.connection import get_session
    from stakewatch.services.queries import IndexerQueryService

    with get_session() as session:
        rows = IndexerQueryService(session).list_snapshots(address, limit=limit)

    if not rows:
        console.print("[yellow]No snapshots found[/yellow]")
        return

    table = Table(title=f"Snapshots for {address.lower()}")
    table.add_column("Day", style="cyan", justify="right")
    table.add_column("Own Stake (start)", justify="right")
    table.add_column("Own Δ", justify="right")
    table.add_column("Delegated (start)", justify="right")
    table.add_column("Delegated Δ", justify="right")
    table.add_column("Rewards", style="green", justify="right")
    table.add_column("Prev 1d", justify="right")
    table.add_column("Prev 7d", justify="right")
    table.add_column("Prev 30d", justify="right")
    table.add_column("Param Changes", justify="right")

    for s in rows:
        table.add_row(
            str(s["dayIndex"]),
            s["ownStakeInitial"],
            s["ownStakeDelta"],
            s["delegatedStakeInitial"],
            s["delegatedStakeDelta"],
            s["delegationRewards"],
            s["previousDelegationRewardsDay"],
            s["previousDelegationRewardsWeek"],
            s["previousDelegationRewardsMonth"],
            str(s["parametersChangeCount"]),
        )

    console.print(table)


@app.command()
def status():
    """Show ledger statistics."""
    from db.connection import get_session
    from db.enums import BadgeType
    from stakewatch.repositories import (
        BadgeRepository,
        DelegatorRepository,
        IndexerRepository,
        IndexerSnapshotRepository,
        ParameterUpdateRepository,
        PoolRewardRepository,
    )

    with get_session() as session:
        indexer_repo = IndexerRepository(session)
        badge_repo = BadgeRepository(session)

        counts = [
            ("Indexers", indexer_repo.count()),
            ("Over-delegated Indexers", len(indexer_repo.list_over_delegated())),
            ("Delegators", DelegatorRepository(session).count()),
            ("Snapshots", IndexerSnapshotRepository(session).count()),
            ("Pool Rewards", PoolRewardRepository(session).count()),
            ("Parameter Updates", ParameterUpdateRepository(session).count()),
        ]
        counts += [(f"Badge: {b.value}", badge_repo.count_for(b.value)) for b in BadgeType]

    table = Table(title="Ledger Status")
    table.add_column("Component", style="cyan")
    table.add_column("Count", style="green", justify="right")
    for name, count in counts:
        table.add_row(name, str(count))

    console.print(table)


if __name__ == "__main__":
    app()
