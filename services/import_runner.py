"""
services.import_runner - Registry of live import flows for the HTTP layer.

Batch runs are long, and a pause request has to reach a run that is
still going, so every run executes on its own background thread with
a private event loop.  At most one run per flow is alive at a time.

Flows untouched for longer than config.FLOW_IDLE_TTL seconds are closed
when the next flow is created, unless a run is still going.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from typing import Awaitable, Callable, Optional

import config
from import_engine.batch import ImportStateError
from import_engine.flow import ImportFlow
from services.entries_service import make_discard_operation, make_insert_operation

logger = logging.getLogger(__name__)


class FlowNotFound(KeyError):
    """Raised for an unknown or already closed flow id."""
    pass


class ImportRunner:

    def __init__(self, idle_ttl: float = config.FLOW_IDLE_TTL,
                 clock: Callable[[], float] = time.monotonic):
        self._flows: dict[str, ImportFlow] = {}
        self._media: dict[str, str] = {}
        self._threads: dict[str, threading.Thread] = {}
        self._touched: dict[str, float] = {}
        self._idle_ttl = idle_ttl
        self._clock = clock
        self._lock = threading.Lock()

    # ── Registry ───────────────────────────────────────────────────────

    def create(self, media_type: str) -> tuple[str, ImportFlow]:
        """Open a new flow targeting one media collection."""
        self.evict_stale()
        media_type = media_type.upper()
        flow = ImportFlow(
            make_insert_operation(media_type),
            make_discard_operation(),
            type_label=config.MEDIA_TYPE_LABELS.get(media_type, "itens"),
        )
        flow_id = uuid.uuid4().hex
        with self._lock:
            self._flows[flow_id] = flow
            self._media[flow_id] = media_type
            self._touched[flow_id] = self._clock()
        return flow_id, flow

    def get(self, flow_id: str) -> ImportFlow:
        with self._lock:
            flow = self._flows.get(flow_id)
            if flow is not None:
                self._touched[flow_id] = self._clock()
        if flow is None:
            raise FlowNotFound(flow_id)
        return flow

    def media_type(self, flow_id: str) -> str:
        self.get(flow_id)
        return self._media[flow_id]

    def close(self, flow_id: str) -> None:
        """Reset and forget a flow.  A run still going stops at its next row boundary."""
        flow = self.get(flow_id)
        flow.close()
        self._forget(flow_id)

    def evict_stale(self) -> list[str]:
        """Close every idle flow older than the TTL.  Returns the evicted ids."""
        now = self._clock()
        with self._lock:
            stale = [fid for fid, t in self._touched.items() if now - t > self._idle_ttl]
        evicted = []
        for flow_id in stale:
            if self.is_busy(flow_id):
                continue
            with self._lock:
                flow = self._flows.get(flow_id)
            if flow is None:
                continue
            flow.close()
            self._forget(flow_id)
            evicted.append(flow_id)
        if evicted:
            logger.info(f"Evicted {len(evicted)} idle import flow(s)")
        return evicted

    def count(self) -> int:
        with self._lock:
            return len(self._flows)

    def _forget(self, flow_id: str) -> None:
        with self._lock:
            self._flows.pop(flow_id, None)
            self._media.pop(flow_id, None)
            self._threads.pop(flow_id, None)
            self._touched.pop(flow_id, None)

    # ── Background runs ────────────────────────────────────────────────

    def is_busy(self, flow_id: str) -> bool:
        with self._lock:
            thread = self._threads.get(flow_id)
        return thread is not None and thread.is_alive()

    def submit(self, flow_id: str, job: Callable[[ImportFlow], Awaitable]) -> None:
        """Run `job(flow)` on a background thread."""
        flow = self.get(flow_id)
        with self._lock:
            current = self._threads.get(flow_id)
            if current is not None and current.is_alive():
                raise ImportStateError("an import run is already in progress")
            thread = threading.Thread(
                target=self._run, args=(flow_id, flow, job),
                name=f"import-{flow_id[:8]}", daemon=True,
            )
            self._threads[flow_id] = thread
        thread.start()

    def wait(self, flow_id: str, timeout: Optional[float] = None) -> bool:
        """Block until the flow's current run ends.  Returns False on timeout."""
        with self._lock:
            thread = self._threads.get(flow_id)
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    @staticmethod
    def _run(flow_id: str, flow: ImportFlow, job: Callable[[ImportFlow], Awaitable]) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(job(flow))
        except Exception as e:
            logger.error(f"Import run for flow {flow_id} failed: {e}")
        finally:
            loop.close()
