"""Polling scanner loop around the redemption service.

The camera and the QR decoder are supplied by the caller: a frame source that
is a context manager with a ``read()`` method, and a ``decode(frame)``
callable returning the decoded text or ``None``.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable
from contextlib import ExitStack
from typing import Any, Protocol

from dealpass.core.config import settings
from dealpass.services.redemption_service import (
    RedemptionOutcome,
    RedemptionResult,
    RedemptionService,
)

logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    def __enter__(self) -> "FrameSource": ...

    def __exit__(self, *exc_info: Any) -> bool | None: ...

    def read(self) -> Any | None: ...


class ScannerSession:
    """Feeds decoded frames to ``RedemptionService.scan``.

    The frame source is held open between ``start()`` and ``stop()`` and is
    released on every exit path of ``run()``. A payload is scanned once while
    it stays in view; it is scanned again only after a frame without it.
    """

    def __init__(
        self,
        frame_source: FrameSource,
        decode: Callable[[Any], str | None],
        service: RedemptionService,
        interval: float | None = None,
        history_size: int = 20,
        customer_name: str | None = None,
        on_result: Callable[[RedemptionResult], None] | None = None,
    ):
        self.frame_source = frame_source
        self.decode = decode
        self.service = service
        self.interval = settings.SCANNER_INTERVAL_SECONDS if interval is None else interval
        self.customer_name = customer_name
        self.on_result = on_result
        self._history: deque[RedemptionResult] = deque(maxlen=history_size)
        self._stack: ExitStack | None = None
        self._source: FrameSource | None = None
        self._last_payload: str | None = None

    @property
    def active(self) -> bool:
        return self._stack is not None

    @property
    def history(self) -> list[RedemptionResult]:
        """Results of this session, most recent first."""
        return list(self._history)

    def start(self) -> None:
        if self._stack is not None:
            return
        stack = ExitStack()
        self._source = stack.enter_context(self.frame_source)
        self._stack = stack
        logger.info("Scanner started")

    def stop(self) -> None:
        stack, self._stack = self._stack, None
        self._source = None
        self._last_payload = None
        if stack is not None:
            stack.close()
            logger.info("Scanner stopped")

    def __enter__(self) -> "ScannerSession":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def poll_once(self) -> RedemptionResult | None:
        """Read one frame and scan its payload if it is new."""
        if self._source is None:
            raise RuntimeError("Scanner is not started")

        frame = self._source.read()
        payload = self.decode(frame) if frame is not None else None
        if not payload:
            self._last_payload = None
            return None
        if payload == self._last_payload:
            return None

        result = self.service.scan(payload, self.customer_name)
        # Store outages are retried while the code stays in view
        retry = result.outcome == RedemptionOutcome.STORE_UNAVAILABLE
        self._last_payload = None if retry else payload
        self._history.appendleft(result)
        logger.info("Scanned %r: %s", result.code, result.outcome.value)
        if self.on_result is not None:
            self.on_result(result)
        return result

    def run(self, stop_event: threading.Event, max_polls: int | None = None) -> None:
        """Poll until ``stop_event`` is set or ``max_polls`` frames were read."""
        polls = 0
        with self:
            while not stop_event.is_set():
                self.poll_once()
                polls += 1
                if max_polls is not None and polls >= max_polls:
                    break
                stop_event.wait(self.interval)
