"""
Process-exit hooks for restoring on-disk state.

``on_exit(callback)`` arms ``callback`` to run synchronously if the
interpreter exits or is told to terminate (SIGINT, SIGTERM, SIGHUP) while the
registration is live. After a signal the previous handler is reinstated and
the signal re-delivered, so the process still ends the way it would have.
Callbacks must not rely on anything but plain blocking calls.
"""

import atexit
import logging
import os
import signal
import threading
from typing import Callable, Dict

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGHUP") if hasattr(signal, name)
)

_callbacks: Dict[object, Callable[[], None]] = {}
_previous_handlers = {}
_state_lock = threading.RLock()
_atexit_armed = False


def on_exit(callback: Callable[[], None]) -> Callable[[], None]:
    """Registers ``callback`` and returns a function that unregisters it."""
    global _atexit_armed

    token = object()
    with _state_lock:
        _callbacks[token] = callback
        if not _atexit_armed:
            atexit.register(run_exit_callbacks)
            _atexit_armed = True
        _install_signal_handlers()

    def unregister():
        with _state_lock:
            _callbacks.pop(token, None)
            if not _callbacks:
                _restore_signal_handlers()

    return unregister


def pending_callbacks() -> int:
    return len(_callbacks)


def run_exit_callbacks() -> None:
    """Runs (and forgets) every registered callback, newest first."""
    with _state_lock:
        callbacks = list(_callbacks.items())
        _callbacks.clear()
    for unused_token, callback in reversed(callbacks):
        try:
            callback()
        except Exception:
            # one broken hook must not keep the others from restoring their state
            logger.exception("exit hook %r failed", callback)


def _install_signal_handlers():
    if threading.current_thread() is not threading.main_thread():
        return
    for signum in HANDLED_SIGNALS:
        if signum in _previous_handlers:
            continue
        try:
            _previous_handlers[signum] = signal.signal(signum, _handle_signal)
        except (ValueError, OSError):
            # ValueError: not in main thread / OSError: signal not supported here
            continue


def _restore_signal_handlers():
    if threading.current_thread() is not threading.main_thread():
        return
    for signum, previous in list(_previous_handlers.items()):
        try:
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        except (ValueError, OSError):
            continue
        del _previous_handlers[signum]


def _handle_signal(signum, frame):
    logger.debug("received signal %s, running exit hooks", signum)
    previous = _previous_handlers.get(signum, signal.SIG_DFL)
    run_exit_callbacks()
    with _state_lock:
        _restore_signal_handlers()

    if callable(previous):
        # e.g. Python's default SIGINT handler raising KeyboardInterrupt
        previous(signum, frame)
    elif previous != signal.SIG_IGN:
        os.kill(os.getpid(), signum)
