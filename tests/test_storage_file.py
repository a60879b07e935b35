"""Tests for file-backed storage."""

import json

import pytest

from shortener.exceptions import DuplicateURLError, StorageError
from shortener.storage import FileURLStorage


def read_records(path):
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def write_records(path, records):
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record) + "\n")


@pytest.fixture
def log_path(tmp_path):
    return str(tmp_path / "short-url-db.json")


@pytest.mark.asyncio
class TestFileURLStorage:
    """Test file-backed storage."""
    
    async def test_open_creates_file(self, log_path, logger):
        storage = FileURLStorage(log_path, logger=logger)
        await storage.open()
        await storage.close()
        
        assert read_records(log_path) == []
    
    async def test_new_records_are_appended(self, log_path, logger, sample_urls):
        storage = FileURLStorage(log_path, logger=logger)
        await storage.open()
        
        first = await storage.update_data(sample_urls[0], "user-1")
        second = await storage.update_data(sample_urls[1], "user-1")
        await storage.close()
        
        assert read_records(log_path) == [
            {"uuid": "1", "short_url": first, "original_url": sample_urls[0]},
            {"uuid": "2", "short_url": second, "original_url": sample_urls[1]},
        ]
    
    async def test_restore_and_rewrite(self, log_path, logger, sample_urls):
        """Previous records are loaded and rewritten with a fresh uuid counter."""
        write_records(log_path, [
            {"uuid": "7", "short_url": "AAAAAAAAAA", "original_url": sample_urls[0]},
            {"uuid": "9", "short_url": "BBBBBBBBBB", "original_url": sample_urls[1]},
        ])
        
        storage = FileURLStorage(log_path, logger=logger)
        await storage.open()
        
        assert len(storage) == 2
        assert await storage.get_data("AAAAAAAAAA") == (sample_urls[0], False)
        assert await storage.get_data("BBBBBBBBBB") == (sample_urls[1], False)
        
        await storage.close()
        
        assert read_records(log_path) == [
            {"uuid": "1", "short_url": "AAAAAAAAAA", "original_url": sample_urls[0]},
            {"uuid": "2", "short_url": "BBBBBBBBBB", "original_url": sample_urls[1]},
        ]
    
    async def test_restored_url_is_duplicate(self, log_path, logger, sample_urls):
        write_records(log_path, [
            {"uuid": "1", "short_url": "AAAAAAAAAA", "original_url": sample_urls[0]},
        ])
        
        storage = FileURLStorage(log_path, logger=logger)
        await storage.open()
        try:
            with pytest.raises(DuplicateURLError) as exc_info:
                await storage.update_data(sample_urls[0], "user-1")
            assert exc_info.value.short_id == "AAAAAAAAAA"
        finally:
            await storage.close()
    
    async def test_survives_restart(self, log_path, logger, sample_urls):
        storage = FileURLStorage(log_path, logger=logger)
        await storage.open()
        short_id = await storage.update_data(sample_urls[0], "user-1")
        await storage.close()
        
        reopened = FileURLStorage(log_path, logger=logger)
        await reopened.open()
        try:
            assert await reopened.get_data(short_id) == (sample_urls[0], False)
        finally:
            await reopened.close()
    
    async def test_malformed_line_fails_open(self, log_path, logger):
        with open(log_path, "w", encoding="utf-8") as f:
            f.write("{not json\n")
        
        storage = FileURLStorage(log_path, logger=logger)
        with pytest.raises(StorageError):
            await storage.open()
    
    async def test_undecodable_log_fails_open(self, log_path, logger):
        with open(log_path, "wb") as f:
            f.write(b'{"uuid": "1", "short_url": "\xff\xfe", "original_url": "x"}\n')
        
        storage = FileURLStorage(log_path, logger=logger)
        with pytest.raises(StorageError):
            await storage.open()
        
        assert storage._file is None
    
    async def test_unwritable_path_fails_open(self, tmp_path, logger):
        storage = FileURLStorage(str(tmp_path / "missing" / "db.json"), logger=logger)
        with pytest.raises(StorageError):
            await storage.open()
