"""File-backed URL storage: in-memory map mirrored to an append-only JSON log."""

import asyncio
import logging
import os
from typing import IO, Optional

from ..exceptions import StorageError
from ..shortcode import ShortCodeGenerator
from .memory import MemoryURLStorage
from .models import ShortLink, StorageRecord


class FileURLStorage(MemoryURLStorage):
    """Memory storage whose new records are appended to a backup log.
    
    Records travel to the log through a queue drained by a single writer
    task, so update_data never waits on disk I/O. On open the previous log
    is replayed into memory, truncated, and rewritten by the writer with a
    fresh uuid counter.
    """
    
    name = "file"
    
    def __init__(
        self,
        path: str,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize file storage.
        
        Args:
            path: Path of the backup log
            short_code_generator: Optional short ID generator
            logger: Optional logger instance
        """
        super().__init__(short_code_generator=short_code_generator, logger=logger)
        self.path = path
        self._events: "asyncio.Queue[Optional[ShortLink]]" = asyncio.Queue()
        self._file: Optional[IO[str]] = None
        self._writer_task: Optional[asyncio.Task] = None
    
    async def open(self) -> None:
        """Open the log, restore previous state and start the writer.
        
        Raises:
            StorageError: If the log cannot be opened or holds a malformed line
        """
        try:
            self._file = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"error open file {self.path}: {e}") from e
        
        try:
            restored = await self.restore()
        except BaseException:
            self._file.close()
            self._file = None
            raise
        
        self._writer_task = asyncio.create_task(self._auto_save())
        self.logger.info(f"Restored {restored} URLs from {self.path}")
    
    async def restore(self) -> int:
        """Replay the log into memory and truncate it.
        
        Every replayed record is queued again so the writer re-appends it.
        
        Returns:
            Number of restored records
        """
        try:
            lines = await asyncio.to_thread(self._read_lines)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"error reading {self.path}: {e}") from e
        
        count = 0
        async with self._lock:
            for line in lines:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = StorageRecord.from_json(line)
                except ValueError as e:
                    raise StorageError(f"malformed record in {self.path}: {e}") from e
                
                self._store(ShortLink(short_id=record.short_url, original_url=record.original_url))
                count += 1
        
        try:
            os.truncate(self.path, 0)
        except OSError as e:
            raise StorageError(f"error truncating {self.path}: {e}") from e
        
        return count
    
    def _read_lines(self):
        with open(self.path, "r", encoding="utf-8") as f:
            return f.readlines()
    
    def _store(self, link: ShortLink) -> None:
        super()._store(link)
        self._events.put_nowait(link)
    
    async def _auto_save(self) -> None:
        counter = 0
        while True:
            link = await self._events.get()
            if link is None:
                break
            
            counter += 1
            record = StorageRecord(
                uuid=str(counter),
                short_url=link.short_id,
                original_url=link.original_url,
            )
            try:
                await asyncio.to_thread(self._write_line, record.to_json() + "\n")
            except OSError as e:
                self.logger.error(f"Error writing backup record {record.uuid}: {e}")
    
    def _write_line(self, data: str) -> None:
        self._file.write(data)
        self._file.flush()
    
    async def close(self) -> None:
        """Flush pending records and close the log."""
        if self._writer_task is not None:
            self._events.put_nowait(None)
            await self._writer_task
            self._writer_task = None
        
        if self._file is not None:
            self._file.close()
            self._file = None
