import threading
from typing import Callable, Sequence

from .errors import CheckpointAbortedError

# Button layout of the RvizVisualToolsGui panel as published on sensor_msgs/Joy
NEXT_BUTTON = 1
CONTINUE_BUTTON = 2


def is_next_pressed(buttons: Sequence[int]) -> bool:
    """True when a remote control message carries a 'Next' (or 'Continue') press."""
    for index in (NEXT_BUTTON, CONTINUE_BUTTON):
        if len(buttons) > index and buttons[index]:
            return True
    return False


class ConsoleCheckpoint:
    """
    Confirmation gate read from a terminal. Blocks until a line is entered;
    there is no timeout.
    """

    def __init__(self, read_line: Callable[[str], str] = input,
                 write: Callable[[str], None] = print):
        self._read_line = read_line
        self._write = write

    def prompt(self, text: str) -> None:
        self._write(text)
        try:
            self._read_line("Press Enter to continue... ")
        except EOFError as e:
            raise CheckpointAbortedError(f"Input closed while waiting at prompt: {text}") from e


class RemoteControlGate:
    """
    Latches 'Next' presses delivered on the spinner thread and lets the main
    thread wait for one. Presses that arrive before wait() starts are dropped.
    """

    def __init__(self, is_ok: Callable[[], bool], poll_period: float = 0.1):
        self._is_ok = is_ok
        self.poll_period = poll_period
        self._next_pressed = threading.Event()

    def on_buttons(self, buttons: Sequence[int]):
        if is_next_pressed(buttons):
            self._next_pressed.set()

    def wait(self, text: str):
        """Block until 'Next' is pressed; no timeout."""
        self._next_pressed.clear()
        while not self._next_pressed.wait(timeout=self.poll_period):
            if not self._is_ok():
                raise CheckpointAbortedError(f"Shutdown while waiting at prompt: {text}")
