from __future__ import annotations

import io

from git_blame_stats.analysis_progress import Progress


class _Clock:
    def __init__(self) -> None:
        self.t = 100.0

    def __call__(self) -> float:
        return self.t


def test_render_shows_counter_eta_and_message() -> None:
    clock = _Clock()
    p = Progress(stream=io.StringIO(), clock=clock)
    p.set_progress("File", 0, 10)
    clock.t += 4
    p.set_progress("File", 2)
    p.set_message("File", "src/app.py")
    assert p.render() == "File: [2/10] ETA: 16s src/app.py"


def test_unknown_total_renders_question_marks() -> None:
    p = Progress(stream=io.StringIO(), clock=_Clock())
    p.set_progress("Repo", 1)
    assert p.render() == "Repo: [1/?] ETA: ?"


def test_redraws_are_throttled_and_close_clears_the_line() -> None:
    clock = _Clock()
    out = io.StringIO()
    p = Progress(stream=out, min_interval_s=1.0, clock=clock)
    p.set_progress("File", 1, 3)
    first = out.getvalue()
    assert "File: [1/3]" in first
    p.set_progress("File", 2)
    assert out.getvalue() == first
    clock.t += 2
    p.set_progress("File", 3)
    assert "File: [3/3]" in out.getvalue()

    p.close()
    assert out.getvalue().endswith("\r")
    assert p.render() == ""
