"""Startup selection of the storage backend."""

import logging
from typing import Optional

from ..exceptions import StorageError
from ..shortcode import ShortCodeGenerator
from .base import URLStorageBase
from .database import DatabaseURLStorage
from .file import FileURLStorage
from .memory import MemoryURLStorage


async def select_storage(
    database_dsn: str = "",
    file_storage_path: str = "",
    short_code_generator: Optional[ShortCodeGenerator] = None,
    logger: Optional[logging.Logger] = None,
) -> URLStorageBase:
    """Choose the storage backend once, at process start.
    
    Priority: database DSN, then file path, then memory. A failure at one
    tier is logged and the next tier is tried; memory cannot fail.
    
    Args:
        database_dsn: PostgreSQL DSN (empty to skip the database tier)
        file_storage_path: Backup log path (empty to skip the file tier)
        short_code_generator: Optional short ID generator shared by backends
        logger: Optional logger
        
    Returns:
        Ready-to-use storage backend
    """
    logger = logger or logging.getLogger(__name__)
    generator = short_code_generator or ShortCodeGenerator()
    
    if database_dsn:
        logger.info("Trying database storage")
        storage = DatabaseURLStorage(
            dsn=database_dsn,
            short_code_generator=generator,
            logger=logger,
        )
        try:
            await storage.connect()
            await storage.migrate()
            logger.info("Using database storage")
            return storage
        except StorageError as e:
            logger.error(f"Database storage unavailable: {e}")
            await storage.close()
    
    if file_storage_path:
        logger.info(f"Trying file storage at {file_storage_path}")
        storage = FileURLStorage(
            path=file_storage_path,
            short_code_generator=generator,
            logger=logger,
        )
        try:
            await storage.open()
            logger.info("Using file storage")
            return storage
        except StorageError as e:
            logger.error(f"File storage unavailable: {e}")
    
    logger.info("Using memory storage")
    return MemoryURLStorage(short_code_generator=generator, logger=logger)
