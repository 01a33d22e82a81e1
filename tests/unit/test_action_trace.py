import json

from mobile_e2e.appium.action_trace import StepTracer
from mobile_e2e.appium.enums import StepStatus


def test_trace_file_name_and_header(tmp_path):
    tracer = StepTracer(tmp_path / "traces", platform="ios")
    path = tracer.start_new_trace("test_login[valid user]")

    assert path.parent == tmp_path / "traces"
    assert path.name.startswith("test_login_valid_user__")
    data = json.loads(path.read_text())
    assert data["test"] == "test_login[valid user]"
    assert data["platform"] == "ios"
    assert data["steps"] == []


def test_steps_are_numbered_and_summarised(tmp_path):
    tracer = StepTracer(tmp_path)
    path = tracer.start_new_trace("test_checkout")
    assert tracer.log_step("tap ~Proceed To Checkout button", StepStatus.PASSED) == 1
    assert tracer.log_step("wait_for_visible ~Checkout Payment Screen", StepStatus.FAILED,
                           {"error": "timeout"}) == 2

    steps = json.loads(path.read_text())["steps"]
    assert [step["status"] for step in steps] == ["passed", "failed"]
    assert steps[1]["details"] == {"error": "timeout"}
    assert isinstance(steps[0]["timestamp_millis"], int)
    assert tracer.summary_text() == (
        "[PASS] 1. tap ~Proceed To Checkout button\n"
        "[FAIL] 2. wait_for_visible ~Checkout Payment Screen"
    )


def test_end_trace_records_duration(tmp_path):
    tracer = StepTracer(tmp_path)
    path = tracer.start_new_trace("test_cart")
    tracer.log_step("tap ~cart badge", StepStatus.PASSED)

    assert tracer.end_trace() == "[PASS] 1. tap ~cart badge"
    assert json.loads(path.read_text())["duration_seconds"] >= 0
    assert tracer.active_trace_path is None


def test_new_trace_resets_steps(tmp_path):
    tracer = StepTracer(tmp_path)
    tracer.start_new_trace("first")
    tracer.log_step("tap ~a", StepStatus.PASSED)
    tracer.start_new_trace("second")
    assert tracer.step_count == 0
    assert tracer.summary_text() == ""


def test_steps_without_trace_stay_in_memory(tmp_path):
    tracer = StepTracer(tmp_path / "never")
    tracer.log_step("tap ~a", StepStatus.PASSED)
    assert tracer.step_count == 1
    assert tracer.end_trace() == "[PASS] 1. tap ~a"
    assert not (tmp_path / "never").exists()
