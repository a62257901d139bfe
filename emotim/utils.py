# emotim/utils.py
from __future__ import annotations

"""
Shared utilities for emotim.

Includes duration formatting, row partitioning for thread pools, progress
lines and console logging ([debug], [warn], [error] prefixes).
"""

import os
import sys
from typing import Any, Iterable, List, Tuple


#  Durations


def format_seconds_compact(seconds: float) -> str:
    """Stage timing: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes, rest = divmod(seconds, 60.0)
    return f"{int(minutes)}m {rest:.1f}s"


def format_total_duration_compact(seconds: float) -> str:
    """Whole run timing, rounded coarser than format_seconds_compact."""
    if seconds >= 60.0:
        minutes, rest = divmod(int(round(seconds)), 60)
        return f"{minutes}m {rest}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


# Thread pools


def default_workers() -> int:
    """One thread per core, keeping one core free on larger machines."""
    n = os.cpu_count() or 1
    return n - 1 if n > 2 else n


def split_rows_into_parts(height: int, parts: int) -> List[Tuple[int, int]]:
    """Cut [0, height) into at most `parts` contiguous [start, end) spans."""
    parts = max(1, int(parts))
    step = max(1, -(-height // parts))
    return [(start, min(start + step, height)) for start in range(0, height, step)]


#  Console output


def print_progress_line(message: str, final: bool = False) -> None:
    """Rewrite the current terminal line; newline once final."""
    sys.stdout.write("\r\033[K" + message)
    if final:
        sys.stdout.write("\n")
    sys.stdout.flush()


def enable_line_buffered_stdout() -> None:
    """Line-buffer stdout where the stream supports reconfigure()."""
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
            pass


# Config lines and log prefixes


def format_value(value: Any) -> str:
    """on/off for bools, thousands separators for ints, trimmed floats."""
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(pairs: Iterable[Tuple[str, Any]], sep: str = "  ") -> str:
    """'Name: value' blocks joined by sep."""
    return sep.join(f"{name}: {format_value(value)}" for name, value in pairs)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [mosaic] Cell size: 20  Method: correlation  Workers: 8
    Routes to debug() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_seconds_compact",
    "format_total_duration_compact",
    "default_workers",
    "split_rows_into_parts",
    "print_progress_line",
    "enable_line_buffered_stdout",
    "format_value",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
