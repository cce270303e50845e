from __future__ import annotations

import click
from flask import Flask, g

from ..common.web import login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sweep", methods=["POST"], endpoint="run_sweep")
    @login_required
    def run_sweep():
        result = container.sweeper.run_on_demand(actor=g.actor)
        return ok(result.to_dict())

    @app.cli.command("sweep-events")
    def sweep_events():
        """Apply the event status rule once and print how many events changed."""
        result = container.sweeper.run()
        for t in result.transitions:
            click.echo(f"{t.event_id} {t.title}: {t.from_status.value} -> {t.to_status.value}")
        for f in result.failed:
            click.echo(f"FAILED {f['eventId']}: {f['message']}", err=True)
        click.echo(f"Updated {result.updated} event(s)")
