import threading
from typing import Callable, Optional, Tuple, Type


class SpinnerThread:
    """
    Runs a blocking spin() on a non-daemon background thread. stop() signals
    the spin loop and joins the thread; later calls are no-ops.
    """

    def __init__(self, spin: Callable[[], None], stop: Callable[[], None], name: str,
                 stop_exceptions: Tuple[Type[BaseException], ...] = ()):
        self._spin = spin
        self._stop = stop
        self._stop_exceptions = stop_exceptions
        self._thread: Optional[threading.Thread] = None
        self._stopped = False
        self.name = name

    def start(self):
        if self._thread is not None:
            raise RuntimeError(f"Spinner '{self.name}' already started")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=False)
        self._thread.start()

    def _run(self):
        try:
            self._spin()
        except self._stop_exceptions:
            pass

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self):
        if self._stopped:
            return
        self._stopped = True
        self._stop()
        if self._thread is not None:
            self._thread.join()
