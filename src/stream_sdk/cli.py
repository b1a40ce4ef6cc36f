"""stream-sdk CLI.

Usage:
    stream-sdk serve                         # Echo server on ws://127.0.0.1:8080/ws
    stream-sdk serve --port 9000 --api-key s3cret
    stream-sdk demo                          # Run the demo client against the server
    stream-sdk demo --endpoint ws://host:9000/ws --api-key s3cret --heartbeat 5
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from .client import StreamClient, create_client
from .config import ClientConfig
from .errors import StreamSDKError
from .events import Event, Metadata

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (logs go to stderr)",
)
def main(log_level: str) -> None:
    """Realtime stream client tools."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, help="Port to bind to")
@click.option("--api-key", default=None, help="Require this bearer token from clients")
def serve(host: str, port: int, api_key: str | None) -> None:
    """Run a local websocket echo server."""
    import uvicorn

    from .server import create_app

    click.echo(f"Echo server listening on ws://{host}:{port}/ws", err=True)
    click.echo("Press Ctrl+C to stop", err=True)
    uvicorn.run(create_app(api_key=api_key), host=host, port=port)


@main.command()
@click.option("--endpoint", default=None, help="WebSocket endpoint (default: from environment)")
@click.option("--api-key", default=None, help="API key sent as bearer token")
@click.option("--heartbeat", type=float, default=None, help="Heartbeat interval in seconds")
@click.option("--title", default="Demo Stream", help="Title of the demo stream")
@click.option("--wait", type=float, default=1.0, help="Seconds to wait for echoed events")
def demo(
    endpoint: str | None,
    api_key: str | None,
    heartbeat: float | None,
    title: str,
    wait: float,
) -> None:
    """Start a stream, send an event, end the stream."""
    try:
        config = ClientConfig.from_env()
        if endpoint is not None:
            config.endpoint = endpoint
        if api_key is not None:
            config.api_key = api_key
        if heartbeat is not None:
            config.heartbeat_interval = heartbeat

        client = create_client(config)
        asyncio.run(_run_demo(client, title, wait))
    except StreamSDKError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)


async def _run_demo(client: StreamClient, title: str, wait: float) -> None:
    def print_event(event: Event) -> None:
        click.echo(f"EVENT: {event.type.value} {event.data}")

    client.on_event(print_event)

    async with client:
        stream_id = await client.start_stream(Metadata(title=title))
        click.echo(f"Started stream: {stream_id}")

        await client.send_event(stream_id, {"viewer": "user-1"})
        await asyncio.sleep(wait)

        await client.end_stream(stream_id)
        click.echo(f"Ended stream: {stream_id}")


if __name__ == "__main__":
    main()
