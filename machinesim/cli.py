"""Command-line interface for the machine sensor simulation."""

import logging
import sys
from typing import Optional

import click

from machinesim.config.constants import FAULT_KINDS, TICK_INTERVAL_S, TICKS_PER_SECOND
from machinesim.engine.scheduler import SimulationScheduler
from machinesim.engine.simulation_engine import SimulationEngine
from machinesim.engine.state import SystemState
from machinesim.validation.progression_checks import (
    snapshots_to_frame,
    summarize_trace,
    validate_progression,
)
from machinesim.web.api_server import run_server


class SimulatedClock:
    """Clock advanced by the caller, one tick period at a time."""

    def __init__(self, start: float = 0.0, step: float = TICK_INTERVAL_S):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        return self.now

    def advance(self) -> None:
        self.now += self.step


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _status_line(snapshot: SystemState) -> str:
    fault = snapshot.active_fault
    fault_desc = f"{fault.fault_kind} {fault.progress:4.0%}" if fault else "idle"
    days = f"{snapshot.days_to_failure:5.1f}d" if snapshot.days_to_failure is not None else "    -"
    values = "  ".join(
        f"{state.config.sensor_id[:4]}={state.current_value:8.2f}"
        for state in snapshot.sensors.values()
    )
    t = snapshot.tick / TICKS_PER_SECOND
    return f"t={t:6.1f}s  {snapshot.overall_status:<8}  ttf={days}  [{fault_desc}]  {values}"


@click.group()
def main():
    """Machine sensor simulation with anomaly detection and failure prediction."""


@main.command()
@click.option("--ticks", default=900, help="Number of ticks to simulate (10 per second).")
@click.option("--seed", default=42, help="Master RNG seed.")
@click.option("--fault", type=click.Choice(FAULT_KINDS), default=None, help="Fault to inject.")
@click.option("--inject-at", default=100, help="Tick at which the fault is injected.")
@click.option("--clear-at", default=None, type=int, help="Tick at which the fault is cleared.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def run(ticks: int, seed: int, fault: Optional[str], inject_at: int,
        clear_at: Optional[int], verbose: bool):
    """Run the simulation headless on simulated time and validate the trace."""
    _configure_logging(verbose)
    logger = logging.getLogger(__name__)

    clock = SimulatedClock()
    engine = SimulationEngine(seed=seed, clock=clock)

    logger.info(f"Simulating {ticks} ticks (seed={seed}, fault={fault or 'none'})")
    snapshots = []
    for i in range(ticks):
        if fault is not None and i == inject_at:
            engine.inject(fault)
        if clear_at is not None and i == clear_at:
            engine.clear()

        clock.advance()
        snapshot = engine.tick()
        snapshots.append(snapshot)

        if snapshot.tick % TICKS_PER_SECOND == 0:
            click.echo(_status_line(snapshot))

    final = snapshots[-1] if snapshots else engine.snapshot
    for detail in final.anomaly_details:
        click.echo(f"  ! {detail}")

    frame = snapshots_to_frame(snapshots)
    summary = summarize_trace(frame)
    if not summary.empty:
        click.echo(summary.to_string())

    if not validate_progression(frame):
        sys.exit(1)


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind.")
@click.option("--port", default=8787, help="Port to bind.")
@click.option("--seed", default=None, type=int, help="Master RNG seed (random if omitted).")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def serve(host: str, port: int, seed: Optional[int], verbose: bool):
    """Run the real-time 10 Hz simulation behind the JSON API."""
    _configure_logging(verbose)
    scheduler = SimulationScheduler(SimulationEngine(seed=seed))
    run_server(host=host, port=port, scheduler=scheduler)


if __name__ == "__main__":
    main()
