from __future__ import annotations

import shutil
import sys
import time
from typing import TextIO


class Progress:
    """
    Single rewritable status line on stderr: `name: [i/n] ETA: Ns message`.

    Redraws are throttled to `min_interval_s`; several named counters share
    the line, joined with ", ".
    """

    def __init__(self, stream: TextIO | None = None, min_interval_s: float = 0.3, clock=time.monotonic) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._progress: dict[str, tuple[int, int | None]] = {}
        self._messages: dict[str, str] = {}
        self._start: dict[str, float] = {}
        self._last_draw = 0.0
        self._drawn = False

    def set_progress(self, name: str, current: int, total: int | None = None) -> None:
        prev_total = self._progress.get(name, (0, None))[1]
        self._progress[name] = (int(current), total if total is not None else prev_total)
        self._start.setdefault(name, self._clock())
        self._maybe_draw()

    def set_message(self, name: str, message: str) -> None:
        self._messages[name] = message
        self._maybe_draw()

    def stop(self, name: str) -> None:
        self._progress.pop(name, None)
        self._messages.pop(name, None)
        self._start.pop(name, None)

    def close(self) -> None:
        for name in list(self._progress):
            self.stop(name)
        self.clear()

    def clear(self) -> None:
        if not self._drawn:
            return
        width = shutil.get_terminal_size((80, 20)).columns
        self.stream.write("\r" + " " * width + "\r")
        self.stream.flush()
        self._drawn = False

    def render(self) -> str:
        now = self._clock()
        parts: list[str] = []
        for name, (current, total) in self._progress.items():
            eta = " ETA: ?"
            start = self._start.get(name)
            if start is not None and total is not None and current > 0:
                elapsed = max(now - start, 1e-9)
                rate = current / elapsed
                eta = f" ETA: {round((total - current) / rate)}s"
            msg = self._messages.get(name, "")
            parts.append(f"{name}: [{current}/{total if total is not None else '?'}]{eta} {msg}".rstrip())
        return ", ".join(parts)

    def _maybe_draw(self) -> None:
        now = self._clock()
        if self._drawn and now - self._last_draw < self.min_interval_s:
            return
        line = self.render()
        if not line:
            return
        width = shutil.get_terminal_size((80, 20)).columns
        self.stream.write("\r" + line[: max(10, width - 1)].ljust(max(10, width - 1)))
        self.stream.flush()
        self._last_draw = now
        self._drawn = True
