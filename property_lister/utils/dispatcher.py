from typing import Any, Awaitable, Callable, List, Optional, Tuple
import asyncio
import logging

from property_lister.services.cache_refresh import RefreshStatus

logger = logging.getLogger(__name__)

Job = Callable[..., Awaitable[Any]]

class RefreshDispatcher:
    """Runs fire-and-forget jobs on a bounded pool of asyncio workers.

    ``submit`` never waits for a job and never raises: a full queue drops the
    job with a warning, and a job that fails is logged and forgotten. In eager
    mode the job runs inline inside ``submit`` instead, and ``join`` waits for
    every queued job, so tests can observe the outcome deterministically.
    """

    def __init__(self, max_workers: int = 4, max_queue_size: int = 1000, eager: bool = False):
        self.max_workers = max_workers
        self.max_queue_size = max_queue_size
        self.eager = eager
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self.stats = {"submitted": 0, "completed": 0, "failed": 0, "dropped": 0}

    @property
    def running(self) -> bool:
        return bool(self._workers)

    async def start(self):
        if self.running or self.eager:
            return
        self._queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._workers = [
            asyncio.create_task(self._worker(n), name=f"cache-refresh-{n}")
            for n in range(self.max_workers)
        ]
        logger.info(f"Refresh dispatcher started with {self.max_workers} workers")

    async def stop(self):
        if not self.running:
            return
        await self.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.info("Refresh dispatcher stopped")

    async def submit(self, name: str, job: Job, *args: Any) -> bool:
        self.stats["submitted"] += 1
        if self.eager:
            await self._run(name, job, args)
            return True

        if not self.running:
            await self.start()
        try:
            self._queue.put_nowait((name, job, args))
        except asyncio.QueueFull:
            self.stats["dropped"] += 1
            logger.warning(f"Refresh queue full, dropping job {name}")
            return False
        return True

    async def join(self):
        if self._queue is not None:
            await self._queue.join()

    async def _worker(self, n: int):
        while True:
            name, job, args = await self._queue.get()
            try:
                await self._run(name, job, args)
            finally:
                self._queue.task_done()

    async def _run(self, name: str, job: Job, args: Tuple[Any, ...]):
        try:
            result = await job(*args)
        except Exception as e:
            self.stats["failed"] += 1
            logger.error(f"Error in background job {name}: {e}", exc_info=True)
            return
        if self._reports_failure(result):
            self.stats["failed"] += 1
            logger.warning(f"Background job {name} reported failure: {result}")
            return
        self.stats["completed"] += 1
        logger.debug(f"Background job {name} finished: {result}")

    @staticmethod
    def _reports_failure(result: Any) -> bool:
        results = result if isinstance(result, list) else [result]
        return any(getattr(r, "status", None) == RefreshStatus.FAILED for r in results)
