"""chatstream CLI - talk to a streaming chat backend from the terminal."""

import asyncio
import logging
import sys

import click

from chatstream.client import StreamingChatClient
from chatstream.config import Configuration


def _build_client(base_url: str | None) -> StreamingChatClient:
    config = Configuration()
    logging.basicConfig(
        level=config.get_logging_config()["level"],
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    client_config = config.get_client_config()
    if base_url:
        client_config["base_url"] = base_url.rstrip("/")
    return StreamingChatClient.from_config(
        client_config, config.get_http_client_config()
    )


@click.group()
@click.version_option(version="0.1.0")
@click.option("--base-url", default=None, help="Backend base URL (overrides config)")
@click.pass_context
def cli(ctx: click.Context, base_url: str | None):
    """chatstream - streaming chat backend client"""
    ctx.obj = {"base_url": base_url}


@cli.command()
@click.pass_context
def health(ctx: click.Context):
    """Probe the backend and exit non-zero if it is unhealthy."""

    async def execute() -> bool:
        async with _build_client(ctx.obj["base_url"]) as client:
            return await client.check_health()

    healthy = asyncio.run(execute())
    click.echo("healthy" if healthy else "unhealthy")
    sys.exit(0 if healthy else 1)


@cli.command()
@click.argument("message")
@click.option("--session-id", "-s", default="1", help="Conversation id")
@click.pass_context
def chat(ctx: click.Context, message: str, session_id: str):
    """Send MESSAGE and print the streamed reply."""
    errors: list[Exception] = []

    def on_chunk(text: str) -> None:
        click.echo(text, nl=False)

    def on_error(error: Exception) -> None:
        errors.append(error)
        click.echo(f"\n[error] {error}", err=True)

    def on_closed() -> None:
        click.echo()

    async def execute() -> None:
        async with _build_client(ctx.obj["base_url"]) as client:
            session = client.open_chat_stream(
                session_id, message, on_chunk, on_error, on_closed
            )
            async with session:
                await session.wait_closed()

    try:
        asyncio.run(execute())
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(130)
    sys.exit(1 if errors else 0)
