#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Storage is chosen once at startup: PostgreSQL when a DSN is configured, else
an append-only backup file when a path is configured, else memory.

Usage:
    python app.py [-a host:port] [-b base_url] [-f file] [-d dsn] [-s] [-t cidr] [-c config.json]

Environment variables (override flags):
    SERVER_ADDRESS - host:port to listen on
    BASE_URL - Base URL for short links
    FILE_STORAGE_PATH - Backup log path
    DATABASE_DSN - PostgreSQL DSN
    ENABLE_HTTPS - Serve over HTTPS
    TRUSTED_SUBNET - CIDR allowed to read internal stats
    CONFIG - JSON config file
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.storage import select_storage
from shortener.users import UserRegistry
from shortener.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger
    
    logger.info("Starting URL shortener service...")
    
    storage = await select_storage(
        database_dsn=config.database_dsn,
        file_storage_path=config.file_storage_path,
        short_code_generator=ShortCodeGenerator(default_length=config.short_id_length),
        logger=logger,
    )
    
    service = URLShortenerService(
        storage=storage,
        registry=UserRegistry(base_url=config.base_url),
        base_url=config.base_url,
        num_workers=config.num_workers,
        logger=logger,
    )
    
    app.state.service = service
    
    logger.info(f"Service started with {storage.name} storage")
    
    yield
    
    logger.info("Shutting down URL shortener service...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config(sys.argv[1:])
    
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )
    
    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'cookie_secret', 'database_dsn'})}")
    
    ssl_options = {}
    if config.enable_https:
        if not (config.tls_cert_file and config.tls_key_file):
            logger.error("HTTPS enabled but TLS_CERT_FILE/TLS_KEY_FILE are not set")
            sys.exit(1)
        ssl_options = {
            "ssl_certfile": config.tls_cert_file,
            "ssl_keyfile": config.tls_key_file,
        }
    
    app = create_app(
        service_instance=None,  # Will be set in lifespan
        config=config,
    )
    
    app.state.logger = logger
    
    # Override lifespan
    app.router.lifespan_context = lifespan
    
    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
        **ssl_options,
    )
    
    server = uvicorn.Server(uvicorn_config)
    
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True
    
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    
    try:
        logger.info(f"Shortener at {config.server_address}")
        server.run()
    except (OSError, SystemExit) as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
