"""Fan-out/fan-in worker pool for soft-deleting a user's links.

One deletion request becomes a DeletionJob placed on an input queue. A
fixed number of worker tasks read that queue; the worker that receives the
job makes a single batch_delete_urls call and emits every deleted ID on its
own output queue. A collector merges the worker queues into one result
stream and closes it once all workers are finished.

A backend failure sets the shared done signal: the failing worker emits
nothing, the remaining workers stop at their next read, and the stream
closes without further results. Nothing is retried.

The tasks are owned by the pipeline, not by the request that submitted the
job, so a deletion keeps running after the HTTP response is sent.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Coroutine, List, Optional, Set

from .storage.base import URLStorageBase


# End-of-stream marker for every queue in the pipeline.
_END = object()


@dataclass
class DeletionJob:
    """IDs of one user to soft-delete, submitted as a single unit."""
    
    user_id: str
    short_ids: List[str]


class DoneSignal:
    """One-shot cancellation flag shared by the tasks of one deletion job."""
    
    def __init__(self):
        self._event = asyncio.Event()
    
    def is_set(self) -> bool:
        return self._event.is_set()
    
    def close(self) -> bool:
        """Set the signal.
        
        Returns:
            True for the caller that actually set it, False if it was
            already set
        """
        if self._event.is_set():
            return False
        self._event.set()
        return True
    
    async def wait(self) -> None:
        await self._event.wait()


class DeletionResults:
    """Merged result stream of one deletion job.
    
    Iterate with ``async for`` to receive deleted short IDs as workers emit
    them; iteration ends when the stream is closed.
    """
    
    def __init__(self, job: DeletionJob, queue: asyncio.Queue, done: DoneSignal):
        self.job = job
        self._queue = queue
        self._done = done
    
    @property
    def failed(self) -> bool:
        """True once a worker reported a backend failure."""
        return self._done.is_set()
    
    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()
    
    async def _iterate(self) -> AsyncIterator[str]:
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            yield item
    
    async def collect(self) -> List[str]:
        """Drain the stream and return every emitted short ID."""
        return [short_id async for short_id in self]


class DeletionPipeline:
    """Runs deletion jobs against a storage backend with a worker pool."""
    
    def __init__(
        self,
        storage: URLStorageBase,
        num_workers: int = 15,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the deletion pipeline.
        
        Args:
            storage: Backend whose batch_delete_urls is invoked
            num_workers: Number of worker tasks started per job
            logger: Optional logger
        """
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")
        
        self.storage = storage
        self.num_workers = num_workers
        self.logger = logger or logging.getLogger(__name__)
        self._tasks: Set[asyncio.Task] = set()
    
    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
    
    def submit(self, user_id: str, short_ids: List[str]) -> DeletionResults:
        """Launch a deletion job and return its result stream immediately."""
        job = DeletionJob(user_id=user_id, short_ids=list(short_ids))
        done = DoneSignal()
        
        input_queue: asyncio.Queue = asyncio.Queue()
        self._spawn(self._feed(job, input_queue, done))
        
        worker_queues = self.distribute(input_queue, done)
        merged: asyncio.Queue = asyncio.Queue()
        self._spawn(self._collect(worker_queues, merged))
        
        self.logger.debug(
            f"Submitted deletion of {len(job.short_ids)} URLs for user {user_id} "
            f"to {self.num_workers} workers"
        )
        return DeletionResults(job, merged, done)
    
    def distribute(self, input_queue: asyncio.Queue, done: DoneSignal) -> List[asyncio.Queue]:
        """Start the workers; return one output queue per worker."""
        outputs = []
        for worker_id in range(self.num_workers):
            output: asyncio.Queue = asyncio.Queue()
            self._spawn(self._worker(worker_id, input_queue, output, done))
            outputs.append(output)
        return outputs
    
    async def _feed(self, job: DeletionJob, input_queue: asyncio.Queue, done: DoneSignal) -> None:
        if not done.is_set():
            await input_queue.put(job)
        for _ in range(self.num_workers):
            await input_queue.put(_END)
    
    async def _worker(
        self,
        worker_id: int,
        input_queue: asyncio.Queue,
        output: asyncio.Queue,
        done: DoneSignal,
    ) -> None:
        try:
            while True:
                job = await input_queue.get()
                if job is _END or done.is_set():
                    return
                
                try:
                    await self.storage.batch_delete_urls(job.user_id, job.short_ids)
                except Exception as e:
                    self.logger.error(
                        f"Worker {worker_id}: batch delete for user {job.user_id} failed: {e}"
                    )
                    done.close()
                    return
                
                for short_id in job.short_ids:
                    await output.put(short_id)
        finally:
            await output.put(_END)
    
    async def _collect(self, worker_queues: List[asyncio.Queue], merged: asyncio.Queue) -> None:
        async def forward(source: asyncio.Queue) -> None:
            while True:
                item = await source.get()
                if item is _END:
                    return
                await merged.put(item)
        
        try:
            await asyncio.gather(*(forward(q) for q in worker_queues))
        finally:
            await merged.put(_END)
    
    def drain(self, results: DeletionResults) -> asyncio.Task:
        """Consume a result stream in the background, logging each deletion."""
        async def log_results() -> None:
            count = 0
            async for short_id in results:
                count += 1
                self.logger.info(f"Deleted short URL: {short_id}")
            
            if results.failed:
                self.logger.error(
                    f"Deletion for user {results.job.user_id} halted after a backend failure"
                )
            else:
                self.logger.debug(f"Deletion for user {results.job.user_id} finished: {count} URLs")
        
        return self._spawn(log_results())
    
    @property
    def pending(self) -> int:
        """Number of pipeline tasks still running."""
        return len(self._tasks)
    
    async def join(self) -> None:
        """Wait until every task launched so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
