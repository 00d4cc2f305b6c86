"""Planetfall technology tree CLI."""

import argparse
import json
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from planetfall_tech.errors import OperationError
from planetfall_tech.ledger import InMemoryLedger
from planetfall_tech.models.database import TechDatabase
from planetfall_tech.models.effects import modifier_key
from planetfall_tech.research.persistence import load_snapshot, save_snapshot
from planetfall_tech.research.scheduler import ResearchScheduler
from planetfall_tech.utils.config import load_config
from planetfall_tech.utils.log import configure_logging
from planetfall_tech.utils.tech_loader import load_technologies

console = Console()


def format_time(seconds: float) -> str:
    """Format seconds to HH:MM:SS."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def tech_status(scheduler: ResearchScheduler, tech_id: str) -> str:
    if scheduler.is_researched(tech_id):
        return "[green]researched[/green]"
    if scheduler.current is not None and scheduler.current.id == tech_id:
        return f"[yellow]researching {scheduler.progress:.0%}[/yellow]"
    if scheduler.is_available(tech_id):
        return "[cyan]available[/cyan]"
    if not scheduler.database.is_valid(tech_id):
        return "[red]invalid[/red]"
    return "[dim]locked[/dim]"


def create_tech_table(scheduler: ResearchScheduler) -> Table:
    """Create a rich table showing every technology and its state."""
    table = Table(title="Technology Tree", show_header=True, header_style="bold magenta")

    table.add_column("Tier", style="dim", width=4, justify="right")
    table.add_column("Technology", style="cyan", width=22)
    table.add_column("Category", style="magenta", width=10)
    table.add_column("Status", width=18)
    table.add_column("Requires", style="white", width=22)
    table.add_column("Cost", style="yellow", width=22)
    table.add_column("Time", style="blue", width=8, justify="right")

    for tier in scheduler.database.tiers():
        for tech in scheduler.nodes_by_tier(tier):
            table.add_row(
                str(tech.tier),
                tech.name,
                tech.category.label,
                tech_status(scheduler, tech.id),
                ", ".join(sorted(tech.prerequisites)) or "-",
                tech.cost_string(),
                tech.time_string(),
            )

    return table


def modifier_keys(database: TechDatabase) -> list[str]:
    """Every modifier key some technology in the database can answer."""
    keys: dict[str, None] = {}
    for tech in database:
        for effect in tech.effects:
            for aspect in effect.aspects():
                keys.setdefault(modifier_key(aspect, effect.scope), None)
    return list(keys)


def create_modifier_table(scheduler: ResearchScheduler) -> Table:
    table = Table(title="Active Modifiers", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", width=32)
    table.add_column("Bonus", style="green", width=10, justify="right")
    table.add_column("Multiplier", style="yellow", width=10, justify="right")

    for key, value in scheduler.get_modifiers(modifier_keys(scheduler.database)).items():
        if value:
            table.add_row(key, f"{value:+.2f}", f"x{1.0 + value:.2f}")

    return table


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Planetfall Technology Research Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                    # Show the default tech tree
  %(prog)s --research basic_tools improved_mining
  %(prog)s --grant ancient_alloys --research ancient_alloys
  %(prog)s --config colony.json --save progress.json
  %(prog)s --load progress.json --export state.json
        """,
    )

    parser.add_argument("--database", type=Path, help="Technology database JSON file")
    parser.add_argument("--config", type=Path, help="Simulation configuration JSON file")
    parser.add_argument(
        "--research",
        nargs="*",
        default=[],
        metavar="TECH",
        help="Technologies to research, in order",
    )
    parser.add_argument(
        "--grant",
        nargs="*",
        default=[],
        metavar="TECH",
        help="Technologies to unlock externally before researching",
    )
    parser.add_argument("--tick", type=float, help="Simulation step in seconds")
    parser.add_argument("--load", type=Path, help="Restore research progress from file")
    parser.add_argument("--save", type=Path, help="Save research progress to file")
    parser.add_argument("--export", type=Path, help="Export final state to JSON file")
    parser.add_argument("--log-level", help="Logging level (default from config)")
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Minimal output (only simulated time)",
    )

    return parser.parse_args()


def finish_current(scheduler: ResearchScheduler, step: float) -> float:
    """Tick the in-flight research to completion. Returns simulated seconds."""
    tech = scheduler.current
    simulated = 0.0
    while scheduler.current is tech:
        scheduler.tick(step)
        simulated += step
    console.print(f"[green]✓ Researched {tech.name}[/green]")
    return simulated


def run_research(scheduler: ResearchScheduler, tech_ids: list[str], step: float) -> float:
    """Research technologies one after another. Returns simulated seconds.

    Research restored in flight is finished first.
    """
    simulated = 0.0
    if scheduler.current is not None:
        console.print(f"[yellow]Resuming {scheduler.current.name}[/yellow]")
        simulated += finish_current(scheduler, step)

    for tech_id in tech_ids:
        try:
            scheduler.start_research(tech_id)
        except OperationError as e:
            console.print(f"[red]✗ {tech_id}: {e}[/red]")
            continue
        simulated += finish_current(scheduler, step)
    return simulated


def main() -> None:
    """Run a research simulation with CLI."""
    args = parse_args()

    config = load_config(args.config)
    if args.database:
        config.database = args.database
    if args.tick:
        config.tick_seconds = args.tick

    configure_logging(args.log_level or ("WARNING" if args.quiet else config.log_level))

    database = load_technologies(config.database)
    ledger = InMemoryLedger(config.starting_resources, config.capacities)
    scheduler = ResearchScheduler(
        database, ledger, apply_research_speed=config.apply_research_speed
    )

    if args.load:
        scheduler.restore(load_snapshot(args.load))

    if not args.quiet:
        console.print(
            Panel.fit(
                "[bold cyan]Planetfall[/bold cyan]\n[yellow]Technology Research[/yellow]",
                border_style="blue",
            )
        )
        console.print(f"\n[bold]Database:[/bold] [magenta]{config.database}[/magenta]")
        console.print(f"[bold]Technologies:[/bold] {len(database)}")
        if database.errors:
            console.print(f"[red]Content errors: {len(database.errors)}[/red]")

    for tech_id in args.grant:
        scheduler.unlock_externally(tech_id)

    simulated = run_research(scheduler, args.research, config.tick_seconds)

    if args.quiet:
        print(format_time(simulated))
    else:
        console.print()
        console.print(create_tech_table(scheduler))
        console.print(create_modifier_table(scheduler))

        console.print("\n[bold]Resources:[/bold]")
        for resource, amount in ledger.amounts().items():
            console.print(f"  • {resource}: [yellow]{amount}[/yellow]")

        buildings = scheduler.unlocked_buildings()
        if buildings:
            console.print(f"\n[bold]Unlocked buildings:[/bold] {', '.join(buildings)}")

        console.print(
            f"\n[bold]Simulated research time:[/bold] [cyan]{format_time(simulated)}[/cyan]"
        )

    if args.save:
        save_snapshot(scheduler.snapshot(), args.save)
        console.print(f"\n[green]✓ Saved progress to {args.save}[/green]")

    if args.export:
        export_data = {
            "database": str(config.database),
            "snapshot": scheduler.snapshot().to_dict(),
            "available": [tech.id for tech in scheduler.available_nodes()],
            "resources": ledger.amounts(),
            "modifiers": {
                key: value
                for key, value in scheduler.get_modifiers(modifier_keys(database)).items()
                if value
            },
            "unlocked_buildings": scheduler.unlocked_buildings(),
            "content_errors": [str(error) for error in database.errors],
            "simulated_seconds": simulated,
        }

        args.export.write_text(json.dumps(export_data, indent=2))
        console.print(f"\n[green]✓ Exported to {args.export}[/green]")


if __name__ == "__main__":
    main()
