import asyncio
import logging

import click
from dotenv import load_dotenv

from sessionflow.config.provider import EnvConfigProvider
from sessionflow.logging_config import configure_logging

load_dotenv()

logger = logging.getLogger("sessionflow.cli")


@click.group()
def cli():
    """Sessionflow session service."""


@cli.command()
@click.option("--host", "host", default=None, help="Bind address (default: API_HOST)")
@click.option("--port", "port", default=None, type=int, help="Bind port (default: API_PORT)")
def serve(host, port):
    """Run the session API."""
    import uvicorn

    from sessionflow.main import create_app

    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()
    configure_logging(api_config.log_level)

    uvicorn.run(
        create_app(config_provider),
        host=host or api_config.host,
        port=port or api_config.port,
        log_config=None,
    )


@cli.command()
def gc():
    """Run one garbage collection pass against the configured driver."""
    from sessionflow.modules.handlers import HandlerFactory

    config_provider = EnvConfigProvider()
    configure_logging(config_provider.get_api_config().log_level)
    factory = HandlerFactory(config_provider.get_session_config())

    async def run() -> int:
        await factory.connect()
        try:
            return await factory.gc()
        finally:
            await factory.disconnect()

    removed = asyncio.run(run())
    click.echo(f"Removed {removed} expired session record(s) using the '{factory.driver}' driver")


if __name__ == "__main__":
    cli()
