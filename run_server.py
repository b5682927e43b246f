"""Run the real-time simulation behind the JSON API.

Usage:
    python run_server.py --port 8787
"""

from __future__ import annotations

import argparse
import logging

from machinesim.engine.scheduler import SimulationScheduler
from machinesim.engine.simulation_engine import SimulationEngine
from machinesim.web.api_server import run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the sensor simulation API server.")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind")
    parser.add_argument("--port", type=int, default=8787, help="Port to bind")
    parser.add_argument("--seed", type=int, default=None, help="Master RNG seed")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    scheduler = SimulationScheduler(SimulationEngine(seed=args.seed))
    run_server(host=args.host, port=args.port, scheduler=scheduler)


if __name__ == "__main__":
    main()
