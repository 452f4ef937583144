"""
debug_trace.py

Debug instrumentation for following gesture and history activity event by
event. Enable by setting the SVGEDIT_TRACE environment variable to 1 (or
``[debug] trace = true`` in settings.toml, see enable()).
"""

import os
import sys
from datetime import datetime
from functools import wraps

# Set SVGEDIT_TRACE=1 to enable debug tracing
DEBUG_TRACE = os.environ.get("SVGEDIT_TRACE", "") not in ("", "0")

# Set SVGEDIT_TRACE_GESTURE=1 to also trace every pointer move (very verbose)
TRACE_GESTURE = os.environ.get("SVGEDIT_TRACE_GESTURE", "") not in ("", "0")

# Log file (None for stderr only)
LOG_FILE = os.environ.get("SVGEDIT_TRACE_FILE") or None

_log_file = None


def _get_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError as e:
            print(f"debug_trace: cannot open {LOG_FILE}: {e}", file=sys.stderr)
    return _log_file


def enable(on: bool = True) -> None:
    """Switch tracing on or off at runtime."""
    global DEBUG_TRACE
    DEBUG_TRACE = on


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE:
        return
    if category == "GESTURE" and not TRACE_GESTURE:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls.

    The enabled check happens per call so enable() takes effect for
    functions decorated at import time.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DEBUG_TRACE:
                return func(*args, **kwargs)
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


def format_history(descriptions, index: int) -> str:
    """Render a history stack with the cursor marked, oldest first.

    ``format_history(["Move rect", "Delete circle"], 0)`` gives::

        > [0] Move rect
          [1] Delete circle
    """
    if not descriptions:
        return "  (empty)"
    lines = []
    for i, text in enumerate(descriptions):
        marker = ">" if i == index else " "
        lines.append(f"{marker} [{i}] {text}")
    return "\n".join(lines)


def close_log():
    """Close log file."""
    global _log_file
    if _log_file:
        _log_file.close()
        _log_file = None
