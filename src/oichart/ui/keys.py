"""Keyboard input for the terminal front ends.

A daemon thread blocks on ``click.getchar()`` and turns key presses into
Commands on a SimpleQueue. The SIGWINCH handler also feeds it, so it must
stay a SimpleQueue: Queue.put from a handler can block on a mutex held by
the interrupted get. The refresh loop consumes the queue on the control thread.
"""

from __future__ import annotations

import logging
import queue
import signal
import threading

import click

from oichart.constants import Command

logger = logging.getLogger(__name__)

KEY_BINDINGS: dict[str, Command] = {
    "q": Command.QUIT,
    "Q": Command.QUIT,
    "r": Command.REFRESH,
    "R": Command.REFRESH,
    "a": Command.SCROLL_LEFT,
    "d": Command.SCROLL_RIGHT,
    "\x1b[D": Command.SCROLL_LEFT,  # POSIX arrows
    "\x1b[C": Command.SCROLL_RIGHT,
    "\xe0K": Command.SCROLL_LEFT,  # Windows arrows
    "\xe0M": Command.SCROLL_RIGHT,
    "+": Command.GROW,
    "=": Command.GROW,
    "-": Command.SHRINK,
}


def command_for_key(key: str) -> Command | None:
    return KEY_BINDINGS.get(key)


class KeyReader:
    """Feeds key presses into a command queue from a background thread."""

    def __init__(self, commands: queue.SimpleQueue | None = None):
        self.commands: queue.SimpleQueue = commands if commands is not None else queue.SimpleQueue()
        self._thread: threading.Thread | None = None

    def _read_loop(self) -> None:
        while True:
            try:
                key = click.getchar()
            except (KeyboardInterrupt, EOFError):
                self.commands.put(Command.QUIT)
                return

            command = command_for_key(key)
            if command is None:
                continue
            self.commands.put(command)
            if command == Command.QUIT:
                return

    def start(self) -> queue.SimpleQueue:
        self._thread = threading.Thread(target=self._read_loop, name="key-reader", daemon=True)
        self._thread.start()
        self._install_resize_handler()
        return self.commands

    def _install_resize_handler(self) -> None:
        if not hasattr(signal, "SIGWINCH"):
            return
        try:
            signal.signal(signal.SIGWINCH, lambda *_: self.commands.put(Command.RELAYOUT))
        except ValueError:
            # Not on the main thread
            logger.debug("Resize handler not installed")
