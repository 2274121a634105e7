"""``python -m gastransfer``: run the CLI with a persistent run log.

Every invocation appends one line to ``runs.log`` in the state directory
(``$GASTRANSFER_STATE_DIR``, else ``$XDG_STATE_HOME/gastransfer``). An
unexpected exception also leaves a timestamped ``crash_<utc>.log`` there.
Typed solver failures are not crashes; the CLI reports them itself.
"""

from __future__ import annotations

import logging
import os
import sys
import tempfile
import traceback
from pathlib import Path

from . import __version__
from .io import utc_timestamp


def state_dir() -> Path:
    base = os.environ.get("GASTRANSFER_STATE_DIR")
    if base:
        d = Path(base)
    else:
        xdg = os.environ.get("XDG_STATE_HOME") or os.path.expanduser("~/.local/state")
        d = Path(xdg) / "gastransfer"
    try:
        d.mkdir(parents=True, exist_ok=True)
    except OSError:
        d = Path(tempfile.gettempdir()) / "gastransfer"
        d.mkdir(parents=True, exist_ok=True)
    return d


def _run_logger(d: Path) -> logging.Logger:
    log = logging.getLogger("gastransfer.run")
    log.setLevel(logging.INFO)
    log.propagate = False
    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()
    fh = logging.FileHandler(d / "runs.log", encoding="utf-8")
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    log.addHandler(fh)
    return log


def run(argv: list[str] | None = None) -> int:
    from .cli import main

    d = state_dir()
    log = _run_logger(d)
    args = sys.argv[1:] if argv is None else argv
    log.info("gastransfer %s argv=%s", __version__, args)
    try:
        code = main(args)
    except Exception:
        crash = d / f"crash_{utc_timestamp()}.log"
        log.exception("crashed, see %s", crash.name)
        crash.write_text(traceback.format_exc(), encoding="utf-8")
        return 1
    log.info("exit code %s", code)
    return code


if __name__ == "__main__":
    raise SystemExit(run())
