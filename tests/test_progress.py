import io

from emrtracks.progress import ProgressReporter


class FakeClock:
    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now


def make(maxsteps=100, step=10, prefix=""):
    clock = FakeClock()
    out = io.StringIO()
    rep = ProgressReporter(maxsteps, step, prefix=prefix, stream=out, clock=clock)
    return rep, clock, out


def test_no_output_below_report_step():
    rep, clock, out = make()
    clock.now = 5000
    rep.report(5)
    assert out.getvalue() == ""
    assert rep.elapsed_steps == 5


def test_report_percentage():
    rep, clock, out = make()
    clock.now = 2000
    rep.report(20)
    assert out.getvalue() == "20%..."
    assert rep.elapsed == 2000


def test_no_report_when_too_soon():
    rep, clock, out = make()
    clock.now = 500
    rep.report(20)
    assert out.getvalue() == ""
    assert rep.elapsed == 0


def test_repeated_progress_prints_dot():
    rep, clock, out = make(maxsteps=1000, step=1)
    clock.now = 2000
    rep.report(2)
    clock.now = 4000
    rep.report(5)
    assert out.getvalue().endswith(".")
    assert out.getvalue().startswith("0%...")


def test_prefix_printed_once():
    rep, clock, out = make(prefix="work: ")
    clock.now = 2000
    rep.report(20)
    clock.now = 4000
    rep.report(50)
    assert out.getvalue().count("work: ") == 1
    assert out.getvalue().startswith("work: ")


def test_report_last_completes_line():
    rep, clock, out = make()
    clock.now = 2000
    rep.report(20)
    rep.report_last()
    assert out.getvalue() == "20%...100%\n"


def test_report_last_after_full_progress():
    rep, clock, out = make()
    clock.now = 2000
    rep.report(100)
    rep.report_last()
    assert out.getvalue() == "100%\n"


def test_report_last_without_reports_is_silent():
    rep, clock, out = make()
    rep.report_last()
    assert out.getvalue() == ""


def test_progress_capped_at_hundred():
    rep, clock, out = make()
    clock.now = 2000
    rep.report(500)
    assert out.getvalue() == "100%"