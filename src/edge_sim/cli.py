import asyncio
import json
import signal
import sys
from functools import partial
from typing import Callable, Optional

import typer
from loguru import logger
from prometheus_client import start_http_server
from pydantic import ValidationError

from edge_sim.config import SimulatorSettings, get_settings
from edge_telemetry.coordinator import (
    CacheStore,
    ConnectionMonitor,
    EdgeSession,
    PublishCoordinator,
    Transport,
)
from edge_telemetry.payload import generate
from edge_telemetry.transport import MqttTransport

app = typer.Typer(help="Edge device simulator (publish trailer telemetry, cache while offline)")

LOG_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSS!UTC}Z - {level} - {message}"


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)


def build_session(
    settings: SimulatorSettings,
    transport_factory: Optional[Callable[[ConnectionMonitor], Transport]] = None,
) -> EdgeSession:
    """Wire cache, monitor, transport and coordinator for one run."""
    cache = CacheStore(settings.cache_file)
    monitor = ConnectionMonitor()
    if transport_factory is None:
        transport = MqttTransport(settings.broker_url, monitor, settings.transport_options)
    else:
        transport = transport_factory(monitor)
    coordinator = PublishCoordinator(
        generator=partial(generate, vehicle_id=settings.vehicle_id),
        cache=cache,
        monitor=monitor,
        transport=transport,
        topic=settings.topic,
        interval=settings.publish_interval_sec,
        coord_id=settings.vehicle_id,
    )
    return EdgeSession(cache=cache, monitor=monitor, transport=transport, coordinator=coordinator)


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))


async def serve(session: EdgeSession) -> None:
    stop = asyncio.Event()
    _install_signal_handlers(stop)
    await session.run_until(stop)


def _load_settings(**overrides) -> SimulatorSettings:
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return SimulatorSettings(**values) if values else get_settings()
    except ValidationError as e:
        logger.error(f"Invalid settings: {e}")
        sys.exit(2)


@app.command()
def run(
    broker: Optional[str] = typer.Option(None, help="Broker URL (mqtt://, mqtts://, ws://, wss://)"),
    topic: Optional[str] = typer.Option(None, help="Publish topic"),
    interval: Optional[float] = typer.Option(None, help="Seconds between ticks"),
    cache_file: Optional[str] = typer.Option(None, help="Path of the local cache file"),
):
    """Run the simulator until SIGINT/SIGTERM."""
    settings = _load_settings(
        broker_url=broker, topic=topic, publish_interval_sec=interval, cache_file=cache_file
    )
    configure_logging(settings.log_level)

    if settings.metrics_port:
        start_http_server(settings.metrics_port)
        logger.info(f"Prometheus metrics on :{settings.metrics_port}")

    logger.info(
        "Edge device simulator started. Publishing synthetic trailer data every "
        f"{settings.publish_interval_sec:g} seconds..."
    )
    asyncio.run(serve(build_session(settings)))


@app.command("cache-show")
def cache_show(
    cache_file: Optional[str] = typer.Option(None, help="Path of the local cache file"),
    records: bool = typer.Option(False, "--records", "-r", help="Print the cached records"),
):
    """Show how many records are waiting in the local cache."""
    settings = _load_settings(cache_file=cache_file)
    configure_logging(settings.log_level)
    pending = asyncio.run(CacheStore(settings.cache_file, mkdirs=False).load())
    typer.echo(f"{len(pending)} cached entries in {settings.cache_file}")
    if records:
        typer.echo(json.dumps(pending, indent=2, ensure_ascii=False))


@app.command("cache-clear")
def cache_clear(
    cache_file: Optional[str] = typer.Option(None, help="Path of the local cache file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Discard every cached record without publishing it."""
    settings = _load_settings(cache_file=cache_file)
    configure_logging(settings.log_level)

    async def _clear() -> int:
        cache = CacheStore(settings.cache_file)
        await cache.load()
        if cache.size == 0:
            return 0
        if not yes and not typer.confirm(f"Discard {cache.size} cached entries?"):
            raise typer.Abort()
        return len(await cache.drain_all())

    dropped = asyncio.run(_clear())
    logger.success(f"Cleared {dropped} cached entries")


@app.command()
def sample(vehicle_id: Optional[str] = typer.Option(None, help="Vehicle id to stamp")):
    """Print one generated telemetry record."""
    record = generate(vehicle_id=vehicle_id or get_settings().vehicle_id)
    typer.echo(json.dumps(record, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
