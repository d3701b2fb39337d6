"""Background worker pool that runs index and delete jobs off the request path."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Literal

from semantic_recall.core.logging import get_logger, log_context
from semantic_recall.core.metrics import INDEX_JOBS, INDEX_QUEUE_DEPTH
from semantic_recall.ingest.pipeline import IndexPipeline

logger = get_logger(__name__)

JobKind = Literal["index", "delete"]


@dataclass(slots=True, frozen=True)
class IndexJob:
    kind: JobKind
    saved_content_id: str


_STOP = object()


class IndexWorkerPool:
    """Fixed set of daemon threads draining a bounded job queue.

    Submissions never block: when the queue is full the job is refused and
    the caller decides what to do. Failed jobs are logged and counted, not
    retried.
    """

    def __init__(self, pipeline: IndexPipeline, workers: int = 2, queue_size: int = 100) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.pipeline = pipeline
        self.workers = workers
        self._queue: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return bool(self._threads)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        with self._lock:
            if self._threads:
                return
            for position in range(self.workers):
                thread = threading.Thread(
                    target=self._run, name=f"recall-index-{position}", daemon=True
                )
                thread.start()
                self._threads.append(thread)
        logger.info("Started %s index workers", self.workers)

    def submit_index(self, saved_content_id: str) -> bool:
        return self._submit(IndexJob(kind="index", saved_content_id=saved_content_id))

    def submit_delete(self, saved_content_id: str) -> bool:
        return self._submit(IndexJob(kind="delete", saved_content_id=saved_content_id))

    def join(self) -> None:
        """Block until every queued job has been processed."""
        self._queue.join()

    def stop(self) -> None:
        """Drain the queue, then stop every worker thread."""
        with self._lock:
            threads, self._threads = self._threads, []
        if not threads:
            return
        self._queue.join()
        for _ in threads:
            self._queue.put(_STOP)
        for thread in threads:
            thread.join()
        logger.info("Stopped index workers")

    def _submit(self, job: IndexJob) -> bool:
        try:
            self._queue.put_nowait(job)
        except queue.Full:
            INDEX_JOBS.labels(kind=job.kind, status="rejected").inc()
            logger.warning("Index queue full; %s job for %s not accepted", job.kind, job.saved_content_id)
            return False
        INDEX_QUEUE_DEPTH.set(self._queue.qsize())
        return True

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._process(item)
            finally:
                self._queue.task_done()
                INDEX_QUEUE_DEPTH.set(self._queue.qsize())

    def _process(self, job: IndexJob) -> None:
        with log_context(job=job.kind, content_id=job.saved_content_id):
            try:
                if job.kind == "index":
                    self.pipeline.index(job.saved_content_id)
                else:
                    self.pipeline.remove(job.saved_content_id)
            except Exception:
                INDEX_JOBS.labels(kind=job.kind, status="failed").inc()
                logger.exception("Background %s job for %s failed", job.kind, job.saved_content_id)
                return
            INDEX_JOBS.labels(kind=job.kind, status="succeeded").inc()


__all__ = ["IndexJob", "IndexWorkerPool"]
