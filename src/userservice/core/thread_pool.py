"""
=============================================================================
WORKER POOL
=============================================================================

A fixed set of worker threads pulling connection jobs from one shared queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept loop                                                        │
    │       │ submit(handle, conn)                                        │
    │       ▼                                                              │
    │   ┌──────────────────────────────────────────────┐                   │
    │   │  queue.Queue (unbounded)                     │                   │
    │   │  [job] [job] [job] ...                       │                   │
    │   └──────────────────────────────────────────────┘                   │
    │       │            │            │            │                       │
    │       ▼            ▼            ▼            ▼                       │
    │   Worker-0     Worker-1     Worker-2     Worker-3                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The number of workers is fixed when the pool starts. When every worker is
busy, accepted connections wait in the queue; nothing is rejected. A job that
raises is logged and the worker picks up the next one, so one bad connection
never takes a worker out of service.

Shutdown puts one poison pill (None) per worker at the back of the queue.
Jobs queued before the pills still run.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Job:
    """A deferred call: func(*args, **kwargs)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    submitted_at: float = field(default_factory=time.monotonic)

    def run(self) -> Any:
        return self.func(*self.args, **self.kwargs)


class Worker(threading.Thread):
    """
    One worker thread.

    Loop:
        1. Block on the queue
        2. None → exit
        3. Run the job, logging anything it raises
        4. task_done(), back to 1
    """

    def __init__(self, jobs: "queue.Queue[Optional[Job]]", worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.jobs = jobs
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.jobs_completed = 0
        self.jobs_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            job = self.jobs.get()
            try:
                if job is None:
                    break
                self._execute(job)
            finally:
                self.jobs.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute(self, job: Job):
        self.state = WorkerState.BUSY
        started = time.monotonic()
        try:
            job.run()
            self.jobs_completed += 1
            logger.debug(
                f"Worker {self.worker_id} finished job in "
                f"{time.monotonic() - started:.3f}s "
                f"(queued {started - job.submitted_at:.3f}s)"
            )
        except Exception as e:
            self.jobs_failed += 1
            logger.exception(f"Worker {self.worker_id} job failed: {e}")
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size worker pool.

    Usage:
        pool = ThreadPool(workers=4)
        pool.start()
        pool.submit(handle_connection, conn)
        ...
        pool.shutdown()
    """

    def __init__(self, workers: int = 4):
        if workers < 1:
            raise ValueError("workers must be >= 1")

        self.size = workers
        self._jobs: "queue.Queue[Optional[Job]]" = queue.Queue()
        self._workers: List[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutting_down = False

    def start(self):
        """Start the workers. Calling start() twice is a no-op."""
        with self._lock:
            if self._started:
                return

            logger.info(f"Starting thread pool with {self.size} workers")
            for worker_id in range(self.size):
                worker = Worker(self._jobs, worker_id)
                self._workers.append(worker)
                worker.start()

            self._started = True
            self._shutting_down = False

    def submit(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """
        Queue func(*args, **kwargs) for the next free worker.

        Never blocks and never drops the job.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutting_down:
            raise RuntimeError("Thread pool is shutting down")

        self._jobs.put(Job(func=func, args=args, kwargs=kwargs))

    def shutdown(self, wait: bool = True, timeout: float = 2.0) -> None:
        """
        Stop the workers after the jobs already queued.

        Args:
            wait: Join each worker thread before returning.
            timeout: Per-worker join timeout in seconds.
        """
        with self._lock:
            if not self._started:
                return
            self._shutting_down = True

            logger.info("Shutting down thread pool...")
            for _ in self._workers:
                self._jobs.put(None)

            if wait:
                for worker in self._workers:
                    worker.join(timeout=timeout)

            completed = sum(w.jobs_completed for w in self._workers)
            failed = sum(w.jobs_failed for w in self._workers)
            self._workers.clear()
            self._started = False

        logger.info(f"Thread pool shutdown complete ({completed} jobs, {failed} failed)")

