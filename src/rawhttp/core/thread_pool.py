"""
=============================================================================
WORKER THREAD POOL
=============================================================================

Runs each accepted connection on its own worker thread, so one slow
client cannot stall everyone else.

=============================================================================
SERIAL VS POOLED
=============================================================================

    SERIAL (accept, handle, accept, handle, ...):
    ─────────────────────────────────────────────

        t=0s   accept A   → A connects but sends nothing
        t=0s   recv(A)    → blocks ... 30 seconds ...
        t=30s  accept B   → B has been waiting the whole time

    POOLED:
    ───────

        accept loop ──► queue ──► Worker-0: recv(A) (blocked, that's fine)
                              ──► Worker-1: serve B immediately
                              ──► Worker-2: serve C immediately

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ThreadPool                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   submit(func, conn)                                                 │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────────────┐   full? → submit() returns False      │
    │   │  queue.Queue(maxsize=N)  │           (caller answers 503)        │
    │   └────────────┬─────────────┘                                       │
    │                │ get()                                               │
    │        ┌───────┼───────┬───────────┐                                 │
    │        ▼       ▼       ▼           ▼                                 │
    │    Worker-0 Worker-1 Worker-2 ... Worker-(max-1)                     │
    │                                                                      │
    │   min_workers start with the pool. Another is added whenever         │
    │   unfinished tasks outnumber workers, up to max_workers.             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Connections share no mutable state, so the only lock here protects the
pool's own list of workers.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker thread states, for monitoring."""

    IDLE = "idle"        # Waiting for a task
    BUSY = "busy"        # Running a task
    STOPPED = "stopped"  # Thread exited


@dataclass
class Task:
    """
    A deferred call: func(*args), run later by some worker.
    """

    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread that pulls tasks from the shared queue.

        loop:
            task = queue.get()      (wakes every idle_timeout to check shutdown)
            task is None? → exit    (poison pill)
            task.func(*task.args)   (exceptions logged, never kill the worker)
    """

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 1.0):
        # daemon=True: a stuck connection never keeps the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()
        waited = start_time - task.submitted_at

        try:
            task.func(*task.args)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} finished task in {time.time() - start_time:.3f}s "
                f"(queued {waited:.3f}s)"
            )
        except Exception as e:
            # One bad connection must not take the worker down with it
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        """Signal the worker to stop after its current task."""
        self._shutdown.set()


class ThreadPool:
    """
    Fixed-bounds thread pool.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        if not pool.submit(handle, conn):
            ...  # saturated
        pool.shutdown(wait=True, timeout=5.0)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 128,
        idle_timeout: float = 1.0,
    ):
        """
        Initialize the thread pool.

        Args:
            min_workers: Workers created by start().
            max_workers: Hard limit on worker threads.
            queue_size: Tasks that may wait for a worker.
            idle_timeout: How often idle workers check for shutdown.
        """
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)

        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Protects _workers
        self._started = False
        self._shutting_down = False
        self._next_worker_id = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutting_down

    def start(self):
        """Start min_workers worker threads. Idempotent."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        self._shutting_down = False
        if self._task_queue.unfinished_tasks:
            # Leftovers (poison pills) from a previous shutdown
            self._task_queue = queue.Queue(maxsize=self.queue_size)
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()
        self._started = True

    def _add_worker(self) -> Worker:
        """Create and start one worker. Caller holds _lock."""
        worker = Worker(
            task_queue=self._task_queue,
            worker_id=self._next_worker_id,
            idle_timeout=self.idle_timeout,
        )
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(self, func: Callable[..., Any], *args: Any) -> bool:
        """
        Queue func(*args) for a worker. Never blocks.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self.is_running:
            raise RuntimeError("Thread pool is not running")

        try:
            self._task_queue.put_nowait(Task(func=func, args=args))
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        """
        Add a worker if there is more outstanding work than workers.

        unfinished_tasks counts tasks queued plus tasks a worker has taken
        but not finished. Worker.state flips to BUSY only after get()
        returns, so it cannot be trusted during a burst.
        """
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            if self._task_queue.unfinished_tasks > len(self._workers):
                logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
                self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound on waiting for the queue to drain. None
                     waits as long as it takes.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutting_down = True

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Thread pool shutdown timed out, abandoning queued tasks")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for worker in workers:
            worker.shutdown()
            try:
                self._task_queue.put_nowait(None)  # Poison pill
            except queue.Full:
                pass  # Worker will see the shutdown flag instead

        for worker in workers:
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def stats(self) -> dict:
        """Worker and task counts, for logs and tests."""
        with self._lock:
            workers = list(self._workers)
        return {
            "workers": {
                "total": len(workers),
                "busy": sum(1 for w in workers if w.state == WorkerState.BUSY),
                "idle": sum(1 for w in workers if w.state == WorkerState.IDLE),
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in workers),
                "failed": sum(w.tasks_failed for w in workers),
            },
        }
