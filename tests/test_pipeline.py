from datetime import datetime, timedelta, timezone

import pytest

from upkeep.core.dataclasses import StageOutcome
from upkeep.core.enums import Criticality, RunStatus, StageStatus, UpdateScope
from upkeep.core.exceptions import ScopeResolutionError, StageError
from upkeep.maintenance.pipeline import PipelineRunner
from upkeep.maintenance.stage import Stage

from conftest import make_context

TABLE = {UpdateScope.FULL: ("s1", "s2", "s3")}


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 10, 19, 3, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class RecordingAction:
    def __init__(self, outcome=None, error=None):
        self.outcome = outcome or StageOutcome.success("done")
        self.error = error
        self.calls = 0

    def __call__(self, context):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.outcome


def make_stage(name, criticality=Criticality.CONTINUE, **kwargs):
    action = RecordingAction(**kwargs)
    return Stage(name, criticality, action, f"Would run {name}"), action


def runner_for(*stages):
    return PipelineRunner(stages, scope_table=TABLE, clock=FakeClock())


def test_stages_run_in_table_order(log_records):
    order = []
    stages = [
        Stage(name, Criticality.CONTINUE, lambda ctx, n=name: order.append(n) or StageOutcome.success(), "")
        for name in ("s3", "s1", "s2")
    ]
    report = runner_for(*stages).run(UpdateScope.FULL, make_context())

    assert order == ["s1", "s2", "s3"]
    assert report.stage_names == ["s1", "s2", "s3"]
    assert report.status is RunStatus.SUCCESS


def test_abort_stage_failure_stops_the_run(log_records):
    s1, a1 = make_stage("s1")
    s2, a2 = make_stage("s2", Criticality.ABORT, outcome=StageOutcome.failure("boom"))
    s3, a3 = make_stage("s3")

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.status is RunStatus.ABORTED
    assert report.stage_names == ["s1", "s2"]
    assert report.outcome_for("s3") is None
    assert a3.calls == 0
    assert report.outcome_for("s2").detail == "boom"
    assert any("not attempted: s3" in r["message"] for r in log_records)


def test_continue_stage_failure_keeps_going(log_records):
    s1, _ = make_stage("s1", outcome=StageOutcome.failure("no winget"))
    s2, a2 = make_stage("s2", Criticality.ABORT)
    s3, a3 = make_stage("s3")

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.status is RunStatus.SUCCESS
    assert report.stage_names == ["s1", "s2", "s3"]
    assert report.outcome_for("s1").status is StageStatus.FAILED
    assert a2.calls == 1 and a3.calls == 1
    warnings = [r["message"] for r in log_records if r["level"].name == "WARNING"]
    assert "s1 is non-critical; continuing with the next stage" in warnings


def test_last_stage_abort_still_reports_aborted(log_records):
    s1, _ = make_stage("s1")
    s2, _ = make_stage("s2")
    s3, _ = make_stage("s3", Criticality.ABORT, outcome=StageOutcome.failure("late"))

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.status is RunStatus.ABORTED
    assert len(report.stages) == 3


def test_raised_exception_becomes_failed_outcome(log_records):
    s1, _ = make_stage("s1", error=RuntimeError("disk on fire"))
    s2, a2 = make_stage("s2")
    s3, _ = make_stage("s3")

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    outcome = report.outcome_for("s1")
    assert outcome.status is StageStatus.FAILED
    assert outcome.detail == "RuntimeError: disk on fire"
    assert a2.calls == 1


def test_upkeep_error_detail_includes_remediation(log_records):
    error = StageError("PSWindowsUpdate module is not installed", remediation="Install-Module PSWindowsUpdate")
    s1, _ = make_stage("s1", Criticality.ABORT, error=error)
    s2, _ = make_stage("s2")
    s3, _ = make_stage("s3")

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.status is RunStatus.ABORTED
    assert report.outcome_for("s1").detail == (
        "PSWindowsUpdate module is not installed (Install-Module PSWindowsUpdate)"
    )


def test_non_outcome_return_is_a_failure(log_records):
    stage = Stage("s1", Criticality.CONTINUE, lambda ctx: "ok", "")
    s2, _ = make_stage("s2")
    s3, _ = make_stage("s3")

    report = runner_for(stage, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.outcome_for("s1").failed


def test_dry_run_skip_outside_dry_run_is_a_failure(log_records):
    s1, _ = make_stage("s1", outcome=StageOutcome.dry_run("pretend"))
    s2, _ = make_stage("s2")
    s3, _ = make_stage("s3")

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.outcome_for("s1").failed


def test_stages_are_not_retried(log_records):
    s1, a1 = make_stage("s1", outcome=StageOutcome.failure("flaky"))
    s2, _ = make_stage("s2")
    s3, _ = make_stage("s3")

    runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert a1.calls == 1


def test_dry_run_invokes_no_action_and_is_deterministic(log_records):
    stages, actions = zip(
        make_stage("s1"),
        make_stage("s2", Criticality.ABORT, outcome=StageOutcome.failure("would abort")),
        make_stage("s3"),
    )
    context = make_context(dry_run=True)

    first = PipelineRunner(stages, scope_table=TABLE, clock=FakeClock()).run(UpdateScope.FULL, context)
    second = PipelineRunner(stages, scope_table=TABLE, clock=FakeClock()).run(UpdateScope.FULL, context)

    assert all(action.calls == 0 for action in actions)
    assert first == second
    assert first.dry_run is True
    assert first.status is RunStatus.SUCCESS
    assert [r.outcome for r in first.stages] == [
        StageOutcome(StageStatus.SKIPPED_DRY_RUN, f"Would run {name}") for name in ("s1", "s2", "s3")
    ]


def test_report_timestamps_are_ordered(log_records):
    s1, _ = make_stage("s1")
    s2, _ = make_stage("s2")
    s3, _ = make_stage("s3")

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.start_time < report.stages[0].started_at
    assert report.stages[-1].finished_at < report.end_time
    assert all(record.duration == 1.0 for record in report.stages)
    assert report.diagnostics.host_name == "DESKTOP-TEST"


def test_outcome_log_lines_follow_stage_markers(log_records):
    s1, _ = make_stage("s1")
    s2, _ = make_stage("s2", outcome=StageOutcome.no_hardware("No NVIDIA display adapter detected"))
    s3, _ = make_stage("s3", outcome=StageOutcome.failure("broken"))

    runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    lines = [(r["level"].name, r["message"]) for r in log_records]
    assert lines[1:] == [
        ("INFO", "▶ [1/3] s1"),
        ("SUCCESS", "s1: done"),
        ("INFO", "▶ [2/3] s2"),
        ("INFO", "s2 skipped: No NVIDIA display adapter detected"),
        ("INFO", "▶ [3/3] s3"),
        ("ERROR", "s3 failed: broken"),
        ("WARNING", "s3 is non-critical; continuing with the next stage"),
    ]


def test_duplicate_stage_names_rejected():
    s1, _ = make_stage("s1")
    with pytest.raises(ValueError, match="Duplicate"):
        PipelineRunner([s1, s1], scope_table=TABLE)


def test_scope_with_undefined_stage_raises():
    s1, _ = make_stage("s1")
    with pytest.raises(ScopeResolutionError, match="s2, s3"):
        PipelineRunner([s1], scope_table=TABLE).stages_for(UpdateScope.FULL)


def test_failed_outcome_requires_detail():
    with pytest.raises(ValueError):
        StageOutcome.failure("  ")


def test_log_timestamps_never_decrease(log_records):
    s1, _ = make_stage("s1")
    s2, _ = make_stage("s2", outcome=StageOutcome.failure("broken"))
    s3, _ = make_stage("s3")

    runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    times = [r["time"] for r in log_records]
    assert times == sorted(times)


def test_blank_error_message_still_yields_a_report(log_records):
    s1, _ = make_stage("s1", error=StageError("   "))
    s2, a2 = make_stage("s2")
    s3, _ = make_stage("s3", error=RuntimeError(" "))

    report = runner_for(s1, s2, s3).run(UpdateScope.FULL, make_context())

    assert report.status is RunStatus.SUCCESS
    assert report.outcome_for("s1").detail == "StageError"
    assert report.outcome_for("s3").detail == "RuntimeError"
    assert a2.calls == 1
