from __future__ import annotations

import os as _os
from typing import Optional

ENV_PY_TRACE = "AUTOCONSOLE_DEBUG_PY_TRACE"
ENV_SHOW_ALL = "AUTOCONSOLE_SHOW_ALL"

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


def _env_flag(name: str) -> bool:
    return _os.environ.get(name, "").strip().lower() in _ON


def debug_py_trace_enabled() -> bool:
    """Whether invocation failures should also print the Python traceback."""
    return _env_flag(ENV_PY_TRACE)


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        _os.environ[ENV_PY_TRACE] = "1"
    else:
        _os.environ.pop(ENV_PY_TRACE, None)


def show_all_from_env() -> bool:
    return _env_flag(ENV_SHOW_ALL)


def parse_toggle(arg: str, current: bool) -> Optional[bool]:
    """Read an ``[on|off]`` command argument; empty flips *current*, junk gives None."""
    word = arg.strip().lower()

    if word == "":
        return not current
    if word in _ON:
        return True
    if word in _OFF:
        return False

    return None
