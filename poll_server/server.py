#!/usr/bin/env python3
"""LivePoll Socket.IO Server

This module wires the session core to the network. It builds the aiohttp
application, attaches the Socket.IO server and the poll gateway, serves the
read-only HTTP endpoints and runs the server from the command line.

Key Features:
- One SessionStore per application, handed to the gateway and HTTP handlers
- Socket.IO session rooms for fan-out
- Health check and session listing endpoints
- Periodic status logging
- Clean shutdown: poll timers cancelled, session state dropped
"""
import os
import asyncio
import logging
import argparse
from typing import Optional

import socketio
from aiohttp import web

from core.session_store import SessionStore
from utils.config_loader import ConfigManager, config as config_manager
from utils.path_config import get_logs_dir

from .gateway import PollGateway
from .http_api import CONFIG_KEY, STORE_KEY, routes

logger = logging.getLogger(__name__)

SIO_KEY = web.AppKey("sio", socketio.AsyncServer)
GATEWAY_KEY = web.AppKey("gateway", PollGateway)
STATUS_TASK_KEY = web.AppKey("status_task", asyncio.Task)


def setup_logging(log_level: str = "INFO", log_format: Optional[str] = None, log_to_file: bool = True) -> logging.Logger:
    """Configure logging with the specified level."""
    handlers = [logging.StreamHandler()]
    if log_to_file:
        handlers.append(logging.FileHandler(os.path.join(get_logs_dir(), "poll_server.log")))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format or '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    return logging.getLogger('livepoll')


def create_app(app_config: Optional[ConfigManager] = None) -> web.Application:
    """Build the aiohttp application with Socket.IO and the HTTP routes attached."""
    app_config = app_config or config_manager

    sio = socketio.AsyncServer(
        async_mode='aiohttp',
        cors_allowed_origins=app_config.get('server', 'cors_origins', default='*'),
        always_connect=True  # the connect handler emits a welcome message
    )
    app = web.Application()
    sio.attach(app)

    store = SessionStore(chat_capacity=app_config.get('chat', 'max_messages'))
    gateway = PollGateway(sio, store, app_config)
    gateway.register()

    app[CONFIG_KEY] = app_config
    app[STORE_KEY] = store
    app[SIO_KEY] = sio
    app[GATEWAY_KEY] = gateway
    app.add_routes(routes)

    app.on_startup.append(_start_background_tasks)
    app.on_shutdown.append(_shutdown_gateway)
    app.on_cleanup.append(_stop_background_tasks)
    return app


# --- Health Check / Periodic Tasks ---

async def periodic_tasks(app: web.Application, interval: float) -> None:
    """Periodically log how many sessions and participants are live."""
    while True:
        await asyncio.sleep(interval)
        try:
            store = app[STORE_KEY]
            summaries = store.summaries()
            participants = sum(summary["participantCount"] for summary in summaries)
            active_polls = sum(1 for summary in summaries if summary["hasActivePoll"])
            logger.info(
                f"Periodic check: {len(summaries)} session(s), {participants} participant(s), "
                f"{active_polls} active poll(s)"
            )
        except Exception as e:
            logger.error(f"Error during periodic tasks: {e}", exc_info=True)


async def _start_background_tasks(app: web.Application) -> None:
    app_config = app[CONFIG_KEY]
    if app_config.get('health_check', 'enabled', default=True):
        interval = app_config.get('health_check', 'interval', default=60)
        app[STATUS_TASK_KEY] = asyncio.create_task(periodic_tasks(app, interval))
        logger.info(f"Periodic tasks started with interval: {interval}s")


async def _shutdown_gateway(app: web.Application) -> None:
    await app[GATEWAY_KEY].shutdown()


async def _stop_background_tasks(app: web.Application) -> None:
    task = app.get(STATUS_TASK_KEY)
    if task and not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Periodic tasks task cancelled.")


# --- Argument Parsing ---

def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="LivePoll Socket.IO Server")
    parser.add_argument('--host', type=str, default=config_manager.get('server', 'host', default='0.0.0.0'),
                        help='Host IP address to bind the server to.')
    parser.add_argument('--port', type=int, default=config_manager.get('server', 'port', default=3000),
                        help='Port number to bind the server to.')
    parser.add_argument('--log-level', type=str, default=config_manager.get('logging', 'level', default='INFO'),
                        help='Logging level (DEBUG, INFO, WARNING, ERROR).')
    return parser.parse_args(argv)


# --- Server Lifecycle ---

async def start_server(host: str, port: int, app_config: Optional[ConfigManager] = None) -> None:
    """Starts the server and keeps it running until cancelled."""
    app = create_app(app_config)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)

    logger.info(f"Starting LivePoll server on {host}:{port}")
    await site.start()
    logger.info(f"Health check: http://{host}:{port}/health")

    try:
        await asyncio.Event().wait()
    finally:
        await stop_server(runner)


async def stop_server(runner: web.AppRunner) -> None:
    """Stops the server and cleans up."""
    logger.info("Stopping LivePoll server...")
    await runner.cleanup()
    logger.info("Server shutdown complete.")


def main(argv=None) -> None:
    args = parse_args(argv)
    setup_logging(
        args.log_level,
        config_manager.get('logging', 'format'),
        config_manager.get('logging', 'to_file', default=True)
    )
    try:
        asyncio.run(start_server(args.host, args.port))
    except KeyboardInterrupt:
        logger.info("Server stopped by user (KeyboardInterrupt).")


if __name__ == '__main__':
    main()
