"""Minimal JSON API over the running simulation.

Serves:
- GET    /api/health          liveness
- GET    /api/state           latest snapshot (?readings=1 adds history)
- GET    /api/faults          fault catalogue and the active fault
- POST   /api/faults/<kind>   inject a fault (409 if rejected)
- DELETE /api/faults          clear the active fault (409 if idle)
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

from machinesim.config.constants import FAULT_CATALOG
from machinesim.engine.scheduler import SimulationScheduler

logger = logging.getLogger(__name__)


def _fault_catalog_payload(scheduler: SimulationScheduler) -> dict:
    active = scheduler.latest.active_fault
    return {
        "faults": [
            {"fault_kind": kind, **meta} for kind, meta in FAULT_CATALOG.items()
        ],
        "active_fault": active.fault_kind if active else None,
    }


class SimulationServer(ThreadingHTTPServer):
    """HTTP server holding a reference to the scheduler it exposes."""

    daemon_threads = True

    def __init__(self, address, scheduler: SimulationScheduler):
        super().__init__(address, SimulationHandler)
        self.scheduler = scheduler


class SimulationHandler(BaseHTTPRequestHandler):
    """Serve the simulation API."""

    server: SimulationServer

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)

    def _send_json(self, payload: dict, status: HTTPStatus = HTTPStatus.OK) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        route = parsed.path.rstrip("/")
        scheduler = self.server.scheduler

        if route == "/api/health":
            self._send_json({
                "status": "ok",
                "service": "machinesim",
                "running": scheduler.is_running,
                "tick": scheduler.latest.tick,
            })
            return

        if route == "/api/state":
            query = parse_qs(parsed.query)
            include_readings = query.get("readings", ["0"])[0] in {"1", "true", "yes"}
            self._send_json(scheduler.latest.to_dict(include_readings=include_readings))
            return

        if route == "/api/faults":
            self._send_json(_fault_catalog_payload(scheduler))
            return

        self.send_error(HTTPStatus.NOT_FOUND, "Not found")

    def do_POST(self) -> None:  # noqa: N802
        route = urlparse(self.path).path.rstrip("/")
        prefix = "/api/faults/"
        if not route.startswith(prefix):
            self.send_error(HTTPStatus.NOT_FOUND, "Not found")
            return

        fault_kind = route[len(prefix):]
        if fault_kind not in FAULT_CATALOG:
            self._send_json(
                {"accepted": False, "error": f"unknown fault kind: {fault_kind}"},
                HTTPStatus.NOT_FOUND,
            )
            return

        accepted = self.server.scheduler.inject(fault_kind)
        if accepted:
            self._send_json({"accepted": True, "fault_kind": fault_kind})
        else:
            self._send_json(
                {"accepted": False, "error": "a fault is already active"},
                HTTPStatus.CONFLICT,
            )

    def do_DELETE(self) -> None:  # noqa: N802
        route = urlparse(self.path).path.rstrip("/")
        if route != "/api/faults":
            self.send_error(HTTPStatus.NOT_FOUND, "Not found")
            return

        if self.server.scheduler.clear():
            self._send_json({"cleared": True})
        else:
            self._send_json({"cleared": False, "error": "no active fault"}, HTTPStatus.CONFLICT)


def create_server(
    scheduler: SimulationScheduler, host: str = "127.0.0.1", port: int = 8787,
) -> SimulationServer:
    return SimulationServer((host, port), scheduler)


def run_server(
    host: str = "127.0.0.1",
    port: int = 8787,
    scheduler: SimulationScheduler | None = None,
) -> None:
    """Start the scheduler and serve the API until interrupted."""
    scheduler = scheduler or SimulationScheduler()
    server = create_server(scheduler, host, port)
    scheduler.start()

    access_host = "127.0.0.1" if host in {"0.0.0.0", "::"} else host
    logger.info(f"API server running at http://{access_host}:{port}/api/state")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        scheduler.stop()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_server()
