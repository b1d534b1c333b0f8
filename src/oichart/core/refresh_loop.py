"""Refresh/render loop.

Ties the tick timer and user commands to the window cursor, derives a Frame
for every change and fans it out to the attached renderers. Polling readers
(the web API) pull the latest frame with ``current_frame()``.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Sequence

from oichart.constants import MIN_WINDOW_POINTS, Command
from oichart.core.frame import Frame, Renderer, build_frame
from oichart.core.locks import ReadWriteLock
from oichart.core.series_store import SeriesStore
from oichart.core.window import Window, WindowCursor
from oichart.data.market_data import MarketRecord
from oichart.exceptions import FetchError, NoDataError

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Sequence[MarketRecord]]


class RefreshLoop:
    """
    Window state machine shared by all front ends.

    Writers (tick, scroll, resize, load) are serialized by one mutex. The
    current frame sits behind a reader/writer lock that is held only while
    the reference is swapped or copied out.
    """

    def __init__(
        self,
        store: SeriesStore,
        cursor: WindowCursor,
        fetch: FetchFn | None = None,
        renderers: Sequence[Renderer] = (),
    ):
        self.store = store
        self.cursor = cursor
        self.fetch = fetch
        self._renderers: list[Renderer] = list(renderers)
        self._writer = threading.Lock()
        self._frame_lock = ReadWriteLock()
        self._frame: Frame | None = None
        self._started = False

    # ------------------------------------------------------------------
    # Renderers
    # ------------------------------------------------------------------

    def attach(self, renderer: Renderer) -> None:
        self._renderers.append(renderer)

    def detach(self, renderer: Renderer) -> None:
        if renderer in self._renderers:
            self._renderers.remove(renderer)

    def _present(self, frame: Frame) -> None:
        for renderer in list(self._renderers):
            try:
                renderer.present(frame)
            except Exception as e:
                logger.error(f"Renderer {renderer.__class__.__name__} failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Frame publication
    # ------------------------------------------------------------------

    def _select(self) -> Window:
        records, _ = self.store.snapshot()
        return self.cursor.select(records)

    def _emit(self, window: Window) -> Frame | None:
        """Build, cache and present a frame. Caller holds the writer mutex."""
        if len(window) < MIN_WINDOW_POINTS:
            logger.debug(f"Skipping render: window {window.info} has {len(window)} points")
            return None

        frame = build_frame(window)
        with self._frame_lock.write():
            self._frame = frame
        self._present(frame)
        return frame

    def current_frame(self) -> Frame | None:
        """Latest published frame, or None before the first drawable window."""
        with self._frame_lock.read():
            return self._frame

    # ------------------------------------------------------------------
    # Ticks and commands
    # ------------------------------------------------------------------

    def tick(self) -> Frame | None:
        """Advance the window (except on the first tick) and publish."""
        with self._writer:
            records, length = self.store.snapshot()
            if self._started:
                self.cursor.advance(length)
            self._started = True
            return self._emit(self.cursor.select(records))

    def scroll_left(self) -> Frame | None:
        with self._writer:
            self.cursor.scroll_left()
            return self._emit(self._select())

    def scroll_right(self) -> Frame | None:
        with self._writer:
            self.cursor.scroll_right(len(self.store))
            return self._emit(self._select())

    def resize(self, window_size: int) -> Frame | None:
        with self._writer:
            self.cursor.resize(window_size, len(self.store))
            logger.info(f"Window size set to {window_size}")
            return self._emit(self._select())

    def relayout(self) -> None:
        """Present the current frame again, e.g. after a terminal resize."""
        frame = self.current_frame()
        if frame is not None:
            self._present(frame)

    def load(
        self, records: Sequence[MarketRecord], on_load: Callable[[], None] | None = None
    ) -> Frame | None:
        """
        Replace the series and restart the window at offset 0.

        ``on_load`` runs inside the same writer section as the replace, so
        state describing the series changes together with it.
        """
        with self._writer:
            self.store.replace(records)
            if on_load is not None:
                on_load()
            self.cursor.reset()
            self._started = True
            return self._emit(self._select())

    def refresh(self, fetch: FetchFn | None = None) -> bool:
        """
        Re-fetch the series from the source.

        The fetch runs outside the writer mutex. On failure, or when it returns
        nothing, the current series stays in place.

        Returns:
            True if the new series was applied.
        """
        fetch = fetch or self.fetch
        if fetch is None:
            logger.warning("Refresh requested but no data source is configured")
            return False

        try:
            records = fetch()
        except (FetchError, NoDataError) as e:
            logger.error(f"Failed to refresh data: {e}")
            return False

        if not records:
            logger.error("Failed to refresh data: no records returned")
            return False

        self.load(records)
        logger.info(f"Data refreshed: {len(records)} records")
        return True

    def handle(self, command: Command) -> bool:
        """
        Apply one user command.

        Returns:
            False when the command asks the loop to stop.
        """
        if command == Command.QUIT:
            return False
        if command == Command.REFRESH:
            self.refresh()
        elif command == Command.SCROLL_LEFT:
            self.scroll_left()
        elif command == Command.SCROLL_RIGHT:
            self.scroll_right()
        elif command == Command.GROW:
            self.resize(self.cursor.window_size * 2)
        elif command == Command.SHRINK:
            self.resize(max(MIN_WINDOW_POINTS, self.cursor.window_size // 2))
        elif command == Command.RELAYOUT:
            self.relayout()
        return True

    # ------------------------------------------------------------------
    # Drivers
    # ------------------------------------------------------------------

    def run_interactive(self, commands: queue.SimpleQueue, interval: float) -> None:
        """
        Single-threaded cooperative loop for the terminal front ends.

        Waits on the command queue with the time left until the next tick;
        each command or tick runs to completion before the next one is taken.
        """
        self.tick()
        deadline = time.monotonic() + interval
        while True:
            timeout = max(0.0, deadline - time.monotonic())
            try:
                command = commands.get(timeout=timeout)
            except queue.Empty:
                self.tick()
                deadline = time.monotonic() + interval
                continue

            if not self.handle(command):
                logger.info("Quit requested")
                return

    def run_forever(self, stop_event: threading.Event, interval: float) -> None:
        """Background driver for the web server: tick until ``stop_event`` is set."""
        logger.info(f"Window update loop started (every {interval:.1f}s)")
        while True:
            try:
                frame = self.tick()
                if frame is not None:
                    logger.debug(frame.stats.summary())
            except Exception as e:
                logger.error(f"Error in window update loop: {e}", exc_info=True)
            if stop_event.wait(interval):
                break
        logger.info("Window update loop stopped")

    def start_background(self, interval: float) -> tuple[threading.Thread, threading.Event]:
        """Run ``run_forever`` on a daemon thread."""
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self.run_forever, args=(stop_event, interval), name="window-updater", daemon=True
        )
        thread.start()
        return thread, stop_event
