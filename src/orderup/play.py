#!/usr/bin/env python
"""Simulate OrderUp rounds with a stub crew.

Usage:
    orderup                              # One simulated round with the standard catalog
    orderup --seed 42                    # Reproducible round
    orderup --watch                      # Print the event feed while the round runs
    orderup --rounds 100 --validate      # Stress test with invariant checks
    orderup --catalog orders.yaml        # Spawn from a YAML catalog
"""

import argparse
import logging
import random
import statistics
import sys
from collections import Counter
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from orderup.ai.stub_crew import Crew, StubCrew
from orderup.engine import (
    CollectingValidator,
    GameSession,
    OrderCatalog,
    RoundConfig,
    create_standard_catalog,
)
from orderup.engine.validator import RoundValidator
from orderup.events import EventKind, EventRecorder, RoundEvent, RoundLog, RoundState
from orderup.exceptions import ConfigError, OrderUpError

# Colour per event kind in the --watch feed
_EVENT_STYLES = {
    EventKind.ROUND_START: "bold green",
    EventKind.ROUND_END: "bold red",
    EventKind.ROUND_SUMMARY: "bold",
    EventKind.ROUND_PAUSED: "yellow",
    EventKind.ROUND_RESUMED: "yellow",
    EventKind.TIMER_WARNING: "bold yellow",
    EventKind.STATE_CHANGED: "dim",
    EventKind.ORDER_SPAWNED: "cyan",
    EventKind.ORDER_COMPLETED: "green",
    EventKind.ORDER_EXPIRED: "red",
    EventKind.SCORE_CHANGED: "magenta",
    EventKind.ORDERS_COMPLETED_CHANGED: "dim",
}


def _create_event_printer(console: Console, session: GameSession):
    """Create a hub subscriber that prints events with the round clock."""

    def printer(event: RoundEvent) -> None:
        style = _EVENT_STYLES.get(event.kind, "")
        elapsed = session.config.round_duration - session.remaining_time
        console.print(f"[dim]{elapsed:6.1f}s[/dim] {event}", style=style, highlight=False)

    return printer


def run_round(
    session: GameSession,
    crew: Crew,
    step: float = 1.0,
    console: Optional[Console] = None,
) -> RoundLog:
    """Run one round to completion with fixed-size ticks.

    Args:
        session: Session to drive. A round is started on it.
        crew: Collaborator that completes orders after every tick.
        step: Seconds of round time per tick.
        console: When given, every event except timer updates is printed.

    Returns:
        RoundLog with the recorded events and the final summary.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")

    recorder = EventRecorder(session.hub)
    printer = None
    if console is not None:
        printer = _create_event_printer(console, session)
        for kind in EventKind:
            if kind != EventKind.TIMER_UPDATE:
                session.hub.subscribe(kind, printer)

    try:
        session.start_round()
        while session.state == RoundState.IN_ROUND:
            session.tick(step)
            if session.state == RoundState.IN_ROUND:
                crew.act(session)
    finally:
        recorder.detach()
        if printer is not None:
            session.hub.unsubscribe_all(printer)

    return RoundLog(
        round_number=session.round_number,
        seed=session.config.seed,
        events=list(recorder.events),
        summary=session.get_game_summary(),
        metadata={"step": step, "catalog_size": len(session.catalog)},
    )


def run_simulation(
    config: RoundConfig,
    catalog: OrderCatalog,
    step: float,
    complete_chance: float,
    validator: Optional[RoundValidator] = None,
    log_file: str = "",
    watch: bool = False,
) -> int:
    """Run and report a single simulated round."""
    console = Console()
    crew = StubCrew(seed=config.seed, complete_chance=complete_chance)

    console.print(Panel.fit(
        f"Round of {config.round_duration:.0f}s, seed {config.seed}, "
        f"{len(catalog)} orders in catalog",
        title="OrderUp",
    ))

    with GameSession(config, catalog, validator=validator) as session:
        round_log = run_round(session, crew, step=step, console=console if watch else None)

    console.print(Panel(round_log.summary, title="Round Summary", expand=False))

    if log_file:
        round_log.save_to_file(log_file)
        console.print(f"Event log saved to {log_file}")

    if validator is not None:
        violations = validator.get_violations()
        if violations:
            console.print(f"[red]{len(violations)} violation(s):[/red]")
            for v in violations:
                console.print(f"  [{v.severity.value.upper()}] {v.rule_id}: {v.message}")
            return 1
        console.print("[green]No violations[/green]")

    return 0


def run_stress_test(
    rounds: int,
    config: RoundConfig,
    catalog: OrderCatalog,
    step: float,
    complete_chance: float,
    seed_base: int,
) -> int:
    """Run many validated rounds and print an aggregate report."""
    console = Console()
    scores: list[int] = []
    completed: list[int] = []
    missed: list[int] = []
    violations = []

    for i in range(rounds):
        seed = seed_base + i
        round_config = config.model_copy(update={"seed": seed})
        validator = CollectingValidator()
        crew = StubCrew(seed=seed, complete_chance=complete_chance)

        with GameSession(round_config, catalog, validator=validator) as session:
            run_round(session, crew, step=step)
            scores.append(session.ledger.current_score)
            completed.append(session.ledger.orders_completed)
            missed.append(session.ledger.missed_express_orders)
        violations.extend(validator.get_violations())

    table = Table(title=f"Stress Test ({rounds} rounds, seeds {seed_base}-{seed_base + rounds - 1})")
    table.add_column("Metric")
    table.add_column("Mean", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    for name, values in (("Score", scores), ("Orders completed", completed), ("Missed express", missed)):
        table.add_row(name, f"{statistics.mean(values):.1f}", str(min(values)), str(max(values)))
    console.print(table)

    by_rule = Counter(v.rule_id for v in violations)
    console.print("\nViolations:")
    if by_rule:
        for rule_id, count in sorted(by_rule.items()):
            console.print(f"  {rule_id}: {count}")
    else:
        console.print("  None")

    return 1 if violations else 0


def build_config(args: argparse.Namespace) -> RoundConfig:
    """Merge the optional config file with command line overrides."""
    config = RoundConfig.load_from_file(args.config) if args.config else RoundConfig()
    overrides = {
        "round_duration": args.duration,
        "spawn_interval": args.spawn_interval,
        "max_active_orders": args.max_orders,
        "seed": args.seed,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        # Re-validate so overrides get the same checks as the file
        try:
            config = RoundConfig.model_validate({**config.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigError(f"Invalid command line settings: {e}") from e
    return config


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="OrderUp - simulate timed order-fulfilment rounds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible rounds"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with round settings"
    )
    parser.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="YAML file with products and orders (default: built-in catalog)"
    )
    parser.add_argument("--duration", type=float, default=None, help="Round duration in seconds")
    parser.add_argument("--spawn-interval", type=float, default=None, help="Seconds between spawns")
    parser.add_argument("--max-orders", type=int, default=None, help="Maximum active orders")
    parser.add_argument(
        "--step",
        type=float,
        default=1.0,
        help="Seconds of round time per tick (default: 1.0)"
    )
    parser.add_argument(
        "--complete-chance",
        type=float,
        default=0.15,
        help="Chance per tick that the crew ships an eligible order (default: 0.15)"
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Print the event feed while the round runs"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check engine invariants during the round"
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=None,
        help="Run N validated rounds and print a report (stress test mode)"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default="",
        help="Save the round's event log as YAML to this file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)"
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
    )

    # Generate seed if not provided
    if args.seed is None:
        args.seed = random.randint(1, 1000000)

    # Validate args
    if args.rounds is not None and args.rounds < 1:
        print("Error: --rounds must be a positive integer", file=sys.stderr)
        return 1
    if args.step <= 0:
        print("Error: --step must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.complete_chance <= 1.0:
        print("Error: --complete-chance must be between 0 and 1", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
        catalog = OrderCatalog.load_from_file(args.catalog) if args.catalog else create_standard_catalog()
    except OrderUpError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.rounds is not None:
        return run_stress_test(
            args.rounds,
            config,
            catalog,
            step=args.step,
            complete_chance=args.complete_chance,
            seed_base=args.seed,
        )

    validator: RoundValidator | None = None
    if args.validate:
        validator = CollectingValidator()

    return run_simulation(
        config,
        catalog,
        step=args.step,
        complete_chance=args.complete_chance,
        validator=validator,
        log_file=args.log_file,
        watch=args.watch,
    )


if __name__ == "__main__":
    sys.exit(main())
