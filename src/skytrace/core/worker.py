"""Background render worker and stale-frame filtering.

The worker models the boundary between the rendering core and whatever
presents frames as message passing: render requests (width, height) go in,
complete frames come out. Only one render runs at a time and at most one
request waits behind it; submitting a new request replaces a waiting one
that has not started yet. A render that is already running is not
cancelled, so its frame may arrive after the consumer has changed size.
``FrameSink`` implements the consumer side of that contract by dropping
frames whose pixel count no longer matches.

A failing render or frame callback stops the worker. The failure is
reported as ``RenderWorkerError`` by the next ``get_result``, ``poll_result``
or ``submit`` call, and once more by ``stop``.

Example:
    >>> from skytrace.core.worker import FrameSink, RenderWorker
    >>> from skytrace.scene.presets import default_scene
    >>> sink = FrameSink(640, 360)
    >>> with RenderWorker(default_scene()) as worker:
    ...     worker.submit(640, 360)
    ...     sink.accept(worker.get_result(timeout=60.0))
    True
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from skytrace.core.renderer import RenderSettings, render, validate_dimensions

if TYPE_CHECKING:
    from skytrace.scene.description import Scene

logger = logging.getLogger(__name__)

# Signature of the function that produces a frame
RenderFunction = Callable[..., npt.NDArray[np.uint32]]

# Callback invoked on the worker thread for every finished frame
FrameCallback = Callable[["FrameResult"], None]


class RenderWorkerError(RuntimeError):
    """A render failed on the worker thread."""


@dataclass(frozen=True)
class RenderRequest:
    """Request for one frame.

    Attributes:
        width: Frame width in pixels (positive).
        height: Frame height in pixels (positive).
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        validate_dimensions(self.width, self.height)


@dataclass(frozen=True)
class FrameResult:
    """A finished frame.

    Attributes:
        width: Width the frame was rendered at.
        height: Height the frame was rendered at.
        pixels: Packed 24-bit pixels, row-major, top row first.
        elapsed: Render time in seconds.
    """

    width: int
    height: int
    pixels: npt.NDArray[np.uint32]
    elapsed: float


class RenderWorker:
    """Dedicated thread that renders one frame per request.

    Attributes:
        scene: The scene rendered for every request. Never mutated.
        settings: Render options passed to the render function.
    """

    def __init__(
        self,
        scene: Scene,
        *,
        settings: RenderSettings | None = None,
        on_frame: FrameCallback | None = None,
        render_fn: RenderFunction = render,
    ) -> None:
        """Create a worker. Call start() (or use it as a context manager) to run it.

        Args:
            scene: The scene to render.
            settings: Render options. Defaults to RenderSettings().
            on_frame: Optional callback receiving every FrameResult, called
                on the worker thread.
            render_fn: Function called as render_fn(width, height, scene,
                settings=settings) to produce a frame.
        """
        self.scene = scene
        self.settings = settings if settings is not None else RenderSettings()
        self._on_frame = on_frame
        self._render_fn = render_fn

        # Single slot: a new request replaces a waiting one
        self._requests: queue.Queue[RenderRequest | None] = queue.Queue(maxsize=1)
        # Finished frames, or the exception that stopped the worker
        self._results: queue.Queue[FrameResult | BaseException] = queue.Queue()
        self._submit_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread.

        Raises:
            RuntimeError: If the worker is already running.
        """
        if self.is_running:
            raise RuntimeError("Render worker is already running")
        self._error = None
        self._thread = threading.Thread(target=self._run, name="skytrace-render", daemon=True)
        self._thread.start()

    def submit(self, width: int, height: int) -> None:
        """Queue a render request, replacing any request still waiting.

        Args:
            width: Frame width in pixels.
            height: Frame height in pixels.

        Raises:
            ValueError: If width or height is less than 1.
            RenderWorkerError: If the worker stopped after a failure.
        """
        request = RenderRequest(width, height)
        if self._error is not None:
            raise RenderWorkerError(f"Render worker failed: {self._error}") from self._error
        self._put(request)

    def _put(self, item: RenderRequest | None) -> None:
        with self._submit_lock:
            try:
                superseded = self._requests.get_nowait()
            except queue.Empty:
                pass
            else:
                if superseded is not None:
                    logger.debug(
                        "Dropping superseded render request %dx%d",
                        superseded.width,
                        superseded.height,
                    )
            self._requests.put_nowait(item)

    def get_result(self, timeout: float | None = None) -> FrameResult:
        """Wait for the next finished frame.

        Raises:
            queue.Empty: If no frame arrives within timeout.
            RenderWorkerError: If the worker failed instead of producing a frame.
        """
        return self._unwrap(self._results.get(timeout=timeout))

    def poll_result(self) -> FrameResult | None:
        """Return the next finished frame, or None if there is none yet.

        Raises:
            RenderWorkerError: If the worker failed instead of producing a frame.
        """
        try:
            item = self._results.get_nowait()
        except queue.Empty:
            return None
        return self._unwrap(item)

    @staticmethod
    def _unwrap(item: FrameResult | BaseException) -> FrameResult:
        if isinstance(item, BaseException):
            raise RenderWorkerError(f"Render worker failed: {item}") from item
        return item

    def stop(self, timeout: float | None = None) -> None:
        """Stop the worker after the render in progress, if any, finishes.

        Waiting requests are discarded.

        Raises:
            RenderWorkerError: If a render or the frame callback failed on
                the worker thread. The failure is reported once.
        """
        self._join(timeout)
        if self._error is not None:
            error, self._error = self._error, None
            raise RenderWorkerError(f"Render worker failed: {error}") from error

    def _join(self, timeout: float | None) -> None:
        if self._thread is not None:
            self._put(None)
            self._thread.join(timeout)
            self._thread = None

    def _fail(self, exc: BaseException) -> None:
        self._error = exc
        # Wake up a consumer blocked in get_result()
        self._results.put(exc)

    def _run(self) -> None:
        while True:
            request = self._requests.get()
            if request is None:
                break

            start_time = time.perf_counter()
            try:
                pixels = self._render_fn(
                    request.width, request.height, self.scene, settings=self.settings
                )
            except Exception as exc:
                logger.exception("Render of %dx%d frame failed", request.width, request.height)
                self._fail(exc)
                break

            frame = FrameResult(
                width=request.width,
                height=request.height,
                pixels=pixels,
                elapsed=time.perf_counter() - start_time,
            )
            logger.debug("Finished %dx%d frame in %.3fs", frame.width, frame.height, frame.elapsed)
            self._results.put(frame)

            if self._on_frame is not None:
                try:
                    self._on_frame(frame)
                except Exception as exc:
                    logger.exception("Frame callback failed for %dx%d frame", frame.width, frame.height)
                    self._fail(exc)
                    break

    def __enter__(self) -> RenderWorker:
        self.start()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, *exc_info: object) -> None:
        if exc_type is not None and self._error is not None:
            # The failure is already propagating, typically from get_result()
            self._join(None)
            self._error = None
            return
        self.stop()


class FrameSink:
    """Consumer-side frame holder that discards stale frames.

    Mirrors what a presentation layer keeps: its current size and the last
    accepted buffer. A frame is accepted only if its pixel count equals the
    current width * height.

    Attributes:
        width: Current consumer width in pixels.
        height: Current consumer height in pixels.
        pixels: The buffer to present; zeros until a frame is accepted.
    """

    def __init__(self, width: int, height: int) -> None:
        self.discarded = 0
        self.resize(width, height)

    @property
    def expected_length(self) -> int:
        return self.width * self.height

    def resize(self, width: int, height: int) -> None:
        """Change the consumer size and reset the buffer to black."""
        self.width = width
        self.height = height
        self.pixels: npt.NDArray[np.uint32] = np.zeros(width * height, dtype=np.uint32)

    def accept(self, frame: FrameResult) -> bool:
        """Take a frame if it matches the current size.

        Returns:
            True if the frame replaced the buffer, False if it was stale.
        """
        if len(frame.pixels) != self.expected_length:
            self.discarded += 1
            logger.debug(
                "Discarding stale %dx%d frame for %dx%d surface",
                frame.width,
                frame.height,
                self.width,
                self.height,
            )
            return False
        self.pixels = frame.pixels
        return True
