"""CLI for mixer_client."""

import asyncio
import json
import logging
import signal
from typing import Optional

import typer

from mixer_client import __version__
from mixer_client.core.gateway import CYCLE_TIMESPAN_FIELD
from mixer_client.core.mixer_manager import MixerManager
from mixer_client.errors import MixerClientError
from mixer_client.models.config import Settings
from mixer_client.models.mixer import LIQUID_COUNT

app = typer.Typer(
    name="mixer",
    help="Liquid mixer control client",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False, level: Optional[str] = None) -> None:
    """Configure logging."""
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )


def _alert(message: str) -> None:
    typer.echo(message, err=True)


def _confirm(message: str) -> bool:
    return typer.confirm(message, default=False)


def _manager(ctx: typer.Context, host: Optional[str]) -> MixerManager:
    return MixerManager(ctx.obj["settings"], host=host, alert=_alert, confirm=_confirm)


def _liquid_index(number: int) -> int:
    if not 1 <= number <= LIQUID_COUNT:
        typer.echo(f"Liquid must be within 1..{LIQUID_COUNT}", err=True)
        raise typer.Exit(1)
    return number - 1


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """Liquid mixer control client."""
    settings = Settings()
    setup_logging(verbose, settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["settings"] = settings


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"mixer-client v{__version__}")


@app.command()
def status(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Mixer host (default from MIXER_HOST)"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Read the mixer's settings and values once."""
    manager = _manager(ctx, host)
    gateway = manager.gateway

    try:
        settings = gateway.fetch_settings()
        values = gateway.fetch_values()
    except MixerClientError as e:
        typer.echo(f"Failed to read mixer at {gateway.base_url}: {e}", err=True)
        raise typer.Exit(1)
    finally:
        gateway.close()

    if as_json:
        typer.echo(json.dumps({
            "settings": settings.model_dump(),
            "values": values.model_dump(),
        }, indent=2, default=str))
        return

    typer.echo(f"Mixer: {settings.mixer_name} ({'mixer' if settings.is_mixer else 'bar'} mode)")
    typer.echo(f"  Update version: {values.update_version}")
    for number, (name, color, angle) in enumerate(
        zip(settings.liquid_names, settings.liquid_colors, values.liquid_angles), start=1
    ):
        typer.echo(f"  Liquid {number}: {name} ({color}) at {angle}°")
    typer.echo(f"  Cycle timespan: {values.cycle_timespan}ms")


@app.command()
def shift(
    ctx: typer.Context,
    liquid: int = typer.Argument(..., help="Liquid number (1-3)"),
    degrees: float = typer.Argument(..., help="Signed degrees to move the liquid's boundary"),
    host: Optional[str] = typer.Option(None, "--host", help="Mixer host"),
) -> None:
    """Move a liquid's boundary on the chart and send it to the mixer."""
    index = _liquid_index(liquid)
    manager = _manager(ctx, host)

    async def run() -> bool:
        # Sync once so mode and angles are known before dragging
        await manager.poll_loop.tick()
        return await manager.session.shift(index, degrees)

    try:
        sent = asyncio.run(run())
    finally:
        manager.gateway.close()

    if not sent:
        typer.echo(f"Liquid {liquid} not changed", err=True)
        raise typer.Exit(1)
    typer.echo(f"Liquid {liquid} shifted by {round(degrees)}°")


@app.command()
def timespan(
    ctx: typer.Context,
    milliseconds: int = typer.Argument(..., min=200, max=1000, help="Cycle timespan in ms (200-1000)"),
    host: Optional[str] = typer.Option(None, "--host", help="Mixer host"),
) -> None:
    """Set the pump cycle timespan."""
    manager = _manager(ctx, host)
    slider = manager.session.slider
    if not slider.is_on_step(milliseconds):
        manager.gateway.close()
        typer.echo(
            f"Cycle timespan must be a multiple of {slider.step}ms from {slider.minimum}ms "
            f"(nearest: {slider.snap(milliseconds)}ms)",
            err=True,
        )
        raise typer.Exit(1)

    try:
        sent = asyncio.run(manager.session.commit_slider(milliseconds))
    finally:
        manager.gateway.close()

    if not sent:
        typer.echo(f"Could not send {CYCLE_TIMESPAN_FIELD}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Cycle timespan set to {manager.session.slider.readout}")


def _run_until_signal(manager: MixerManager, serve_web: bool, web_host: str, web_port: int) -> None:
    async def run() -> None:
        loop = asyncio.get_event_loop()
        stop_event = asyncio.Event()

        def handle_signal() -> None:
            typer.echo("\nShutting down...")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_signal)

        await manager.start()

        if serve_web:
            import uvicorn
            from mixer_client.web.app import create_app

            web_app = create_app(manager)
            config = uvicorn.Config(
                web_app,
                host=web_host,
                port=web_port,
                log_level="info",
            )
            server = uvicorn.Server(config)

            typer.echo(f"Web UI available at http://localhost:{web_port}")
            typer.echo("")

            server_task = asyncio.create_task(server.serve())
            await stop_event.wait()
            server.should_exit = True
            await server_task
        else:
            await stop_event.wait()

        manager.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


@app.command()
def watch(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Mixer host"),
) -> None:
    """Poll the mixer continuously and log what changes."""
    manager = _manager(ctx, host)
    typer.echo(f"Watching mixer at {manager.gateway.base_url}")
    typer.echo("Press Ctrl+C to stop\n")

    _run_until_signal(manager, serve_web=False, web_host="", web_port=0)

    typer.echo("Mixer client stopped.")


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Mixer host"),
    web_host: Optional[str] = typer.Option(None, "--web-host", help="Web UI host"),
    web_port: Optional[int] = typer.Option(None, "--port", "-p", help="Web UI port"),
) -> None:
    """Poll the mixer and serve the control API."""
    settings: Settings = ctx.obj["settings"]
    manager = MixerManager(settings, host=host)

    typer.echo(f"Controlling mixer at {manager.gateway.base_url}")
    typer.echo("Press Ctrl+C to stop\n")

    _run_until_signal(
        manager,
        serve_web=True,
        web_host=web_host or settings.web_host,
        web_port=web_port or settings.web_port,
    )

    typer.echo("Mixer client stopped.")


if __name__ == "__main__":
    app()
