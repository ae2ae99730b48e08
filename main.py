"""
Screen service entry point
"""

import asyncio
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from aiohttp import web

from app import create_app
from config import ScreenServiceConfig
from pages import SCREENS, register_services


def setup_logging(config: ScreenServiceConfig):
    """Configure logging"""
    log_level = getattr(logging, str(config.get('logging.level', 'INFO')).upper(), logging.INFO)

    log_file = config.get('logging.file', 'logs/screen.log')
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=log_level,
        format=config.logging.format,
        handlers=[
            RotatingFileHandler(
                log_file,
                maxBytes=config.logging.max_size,
                backupCount=config.logging.backup_count
            ),
            logging.StreamHandler(sys.stdout)
        ]
    )

    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


async def main():
    """Start the service"""
    try:
        environment = sys.argv[1] if len(sys.argv) > 1 else "development"
        config = ScreenServiceConfig(environment=environment)

        setup_logging(config)
        logger = logging.getLogger(__name__)

        logger.info(f"Starting screen service in {environment} environment")

        if not config.validate():
            logger.error("Configuration validation failed")
            sys.exit(1)

        app = await create_app(config, SCREENS)
        register_services(app['container'])

        runner = web.AppRunner(app)
        await runner.setup()

        host = config.service.host
        port = config.service.port

        site = web.TCPSite(runner, host, port)
        await site.start()

        logger.info(f"Screen service started on http://{host}:{port}")

        stop = asyncio.Event()

        def signal_handler():
            logger.info("Received shutdown signal")
            stop.set()

        if sys.platform != 'win32':
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, signal_handler)

        await stop.wait()

        logger.info("Shutting down screen service...")
        await runner.cleanup()
        logger.info("Screen service shutdown complete")

    except Exception as e:
        logging.error(f"Failed to start screen service: {e}")
        sys.exit(1)


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
