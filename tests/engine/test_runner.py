"""Tests for WorkflowRunner using injected sandboxes and loggers."""

import json
from pathlib import Path

import pytest

from transforma.engine import Container, FileState, RunPolicy, WorkflowRunner, run_workflow
from transforma.engine.mocks import MockSandbox
from transforma.exceptions import (
    ConfigNotFoundError,
    ContentFormatError,
    ScriptExecutionError,
    WorkflowAbortedError,
)
from transforma.logger import ListLogger

UPPER_STEP = {"name": "upper", "type": "built-in", "function": "toUpperCase"}
SCRIPT_STEP = {"name": "script", "type": "transform", "function": "scripts/transform.py"}


def _output_dir(config_path: Path) -> Path:
    return config_path.parent / "data" / "output"


class TestBuiltinWorkflows:
    """Runs that only use built-in steps."""

    def test_json_identity_round_trip(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(files={"a.json": '{"id": 1, "tags": ["x"]}'})

        result = run_workflow(config_path)

        written = json.loads((_output_dir(config_path) / "a.json").read_text())
        assert written == {"id": 1, "tags": ["x"]}
        assert result.processed_count == 1

    def test_upper_case_json(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(steps=[UPPER_STEP], files={"a.json": '{"id": 1, "name": "Alice"}'})

        result = run_workflow(config_path)

        output = (_output_dir(config_path) / "a.json").read_text(encoding="utf-8")
        assert output == '{\n  "id": 1,\n  "name": "ALICE"\n}'
        assert result.files[0].state == FileState.WRITTEN
        assert "Successfully processed a.json" in list_logger.messages("success")

    def test_csv_rows_written_as_json(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(steps=[UPPER_STEP], files={"rows.csv": "name,city\nbob,paris\n"})

        run_workflow(config_path)

        output = json.loads((_output_dir(config_path) / "rows.csv").read_text())
        assert output == [{"name": "BOB", "city": "PARIS"}]

    def test_template_text(self, make_workflow, list_logger: ListLogger) -> None:
        step = {"name": "greet", "type": "built-in", "function": "template", "options": {"name": "World"}}
        config_path = make_workflow(steps=[step], files={"hello.txt": "Hello {{ name }}"})

        run_workflow(config_path)

        assert (_output_dir(config_path) / "hello.txt").read_text() == "Hello World"

    def test_steps_run_in_order(self, make_workflow, list_logger: ListLogger) -> None:
        steps = [
            {"name": "greet", "type": "built-in", "function": "template", "options": {"n": "bob"}},
            UPPER_STEP,
        ]
        config_path = make_workflow(steps=steps, files={"a.txt": "hi {{ n }}"})

        run_workflow(config_path)

        assert (_output_dir(config_path) / "a.txt").read_text() == "HI BOB"

    def test_filter_step_passes_through(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(steps=[{"name": "f", "type": "filter"}], files={"a.txt": "same"})
        run_workflow(config_path)
        assert (_output_dir(config_path) / "a.txt").read_text() == "same"

    def test_output_naming_json(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(files={"rows.csv": "a\n1\n"}, output_naming="json")

        result = run_workflow(config_path)

        assert result.files[0].output_path == _output_dir(config_path) / "rows.json"
        assert json.loads(result.files[0].output_path.read_text()) == [{"a": "1"}]

    def test_files_processed_in_name_order(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(files={"b.txt": "b", "a.txt": "a", "c.txt": "c"})
        result = run_workflow(config_path)
        assert [f.input_path.name for f in result.files] == ["a.txt", "b.txt", "c.txt"]


class TestEmptyAndMissing:
    """Runs with nothing to do."""

    def test_missing_config(self, tmp_path: Path, list_logger: ListLogger) -> None:
        with pytest.raises(ConfigNotFoundError):
            run_workflow(tmp_path / "workflow.json")

    def test_missing_input_dir(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(input_dir="nowhere")

        result = run_workflow(config_path)

        assert result.files == []
        assert any("No files found" in m for m in list_logger.messages("warning"))
        assert _output_dir(config_path).is_dir()

    def test_empty_input_dir(self, make_workflow, list_logger: ListLogger) -> None:
        result = run_workflow(make_workflow())
        assert result.processed_count == 0


class TestSkipExisting:
    """skip_existing combined with the reprocess policy."""

    def _workflow(self, make_workflow) -> Path:
        step = {**UPPER_STEP, "skip_existing": True}
        return make_workflow(steps=[step], files={"a.txt": "first"})

    def test_existing_output_left_untouched(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = self._workflow(make_workflow)
        run_workflow(config_path)
        output = _output_dir(config_path) / "a.txt"
        before = output.read_bytes()

        (config_path.parent / "data" / "input" / "a.txt").write_text("second")
        result = run_workflow(config_path)

        assert output.read_bytes() == before == b"FIRST"
        assert result.files[0].state == FileState.SKIPPED
        assert "Skipping already processed file: a.txt" in list_logger.messages("warning")

    def test_force_reprocesses(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = self._workflow(make_workflow)
        run_workflow(config_path)
        (config_path.parent / "data" / "input" / "a.txt").write_text("second")

        result = run_workflow(config_path, force=True)

        assert (_output_dir(config_path) / "a.txt").read_text() == "SECOND"
        assert result.processed_count == 1

    def test_keep_going_alone_still_skips(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = self._workflow(make_workflow)
        run_workflow(config_path)

        result = run_workflow(config_path, policy=RunPolicy(continue_on_error=True))

        assert result.skipped_count == 1

    def test_skip_ignored_without_existing_output(self, make_workflow, list_logger: ListLogger) -> None:
        result = run_workflow(self._workflow(make_workflow))
        assert result.processed_count == 1


class TestTransformSteps:
    """Transform steps routed through the sandbox."""

    def test_sandbox_receives_content_and_merged_options(self, make_workflow) -> None:
        sandbox = MockSandbox(handler=lambda content, options: {"got": content, "opts": options})
        step = {**SCRIPT_STEP, "options": {"b": 2, "a": 10}}
        wfconfig = 'options = {"transform": {"a": 1, "c": 3}}\n'
        config_path = make_workflow(steps=[step], files={"a.json": "[1]"}, wfconfig=wfconfig)
        runner = WorkflowRunner(sandbox=sandbox, logger=ListLogger(), timeout=7.5)

        runner.run(config_path)

        call = sandbox.calls[0]
        assert call["script_path"] == config_path.parent / "scripts" / "transform.py"
        assert call["content"] == [1]
        assert call["options"] == {"a": 10, "b": 2, "c": 3}
        assert call["timeout"] == 7.5
        assert call["cwd"] == config_path.parent
        output = json.loads((_output_dir(config_path) / "a.json").read_text())
        assert output == {"got": [1], "opts": {"a": 10, "b": 2, "c": 3}}

    def test_real_script(self, make_workflow, list_logger: ListLogger) -> None:
        script = (
            "def transform(content, options):\n"
            "    print('rows:', len(content))\n"
            "    return [row['name'] for row in content]\n"
        )
        config_path = make_workflow(
            steps=[SCRIPT_STEP],
            files={"people.csv": "name\nada\ngrace\n"},
            scripts={"scripts/transform.py": script},
        )

        run_workflow(config_path)

        assert json.loads((_output_dir(config_path) / "people.csv").read_text()) == ["ada", "grace"]
        assert "[transform.py] rows: 2" in list_logger.messages("info")


class TestFailures:
    """Per-file failures under both policies."""

    def test_failure_aborts_without_force(self, make_workflow) -> None:
        error = ScriptExecutionError("scripts/transform.py", 1, "boom")
        sandbox = MockSandbox(error=error)
        logger = ListLogger()
        config_path = make_workflow(steps=[SCRIPT_STEP], files={"a.txt": "a", "b.txt": "b"})

        with pytest.raises(WorkflowAbortedError) as exc_info:
            WorkflowRunner(sandbox=sandbox, logger=logger).run(config_path)

        assert exc_info.value.file_name == "a.txt"
        assert exc_info.value.cause is error
        assert len(sandbox.calls) == 1
        assert not (_output_dir(config_path) / "a.txt").exists()
        assert any("Failed to process file a.txt" in m for m in logger.messages("error"))

    def test_failure_continues_with_force(self, make_workflow) -> None:
        def handler(content, options):
            if content == "bad":
                raise ScriptExecutionError("scripts/transform.py", 1, "boom")
            return content

        sandbox = MockSandbox(handler=handler)
        config_path = make_workflow(steps=[SCRIPT_STEP], files={"a.txt": "bad", "b.txt": "good"})

        result = WorkflowRunner(sandbox=sandbox, logger=ListLogger()).run(config_path, force=True)

        failed, written = result.files
        assert failed.state == FileState.FAILED
        assert failed.failed_in == FileState.STEPPING
        assert "boom" in failed.error
        assert written.state == FileState.WRITTEN
        assert (_output_dir(config_path) / "b.txt").read_text() == "good"
        assert result.failed_count == 1

    def test_real_failing_script_with_keep_going(self, make_workflow, list_logger: ListLogger) -> None:
        script = (
            "def transform(content, options):\n"
            "    if content == 'bad':\n"
            "        raise RuntimeError('cannot handle')\n"
            "    return content + '!'\n"
        )
        config_path = make_workflow(
            steps=[SCRIPT_STEP],
            files={"a.txt": "bad", "b.txt": "ok"},
            scripts={"scripts/transform.py": script},
        )

        result = run_workflow(config_path, policy=RunPolicy(continue_on_error=True))

        assert [f.state for f in result.files] == [FileState.FAILED, FileState.WRITTEN]
        assert "RuntimeError: cannot handle" in result.files[0].error
        assert (_output_dir(config_path) / "b.txt").read_text() == "ok!"

    def test_unknown_step_type_fails_at_execution(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(steps=[{"name": "x", "type": "magic"}], files={"a.txt": "a"})

        result = run_workflow(config_path, force=True)

        assert result.files[0].state == FileState.FAILED
        assert "Unsupported step type: magic" in result.files[0].error

    def test_unknown_builtin(self, make_workflow, list_logger: ListLogger) -> None:
        step = {"name": "x", "type": "built-in", "function": "shout"}
        config_path = make_workflow(steps=[step], files={"a.txt": "a"})

        with pytest.raises(WorkflowAbortedError, match="Unknown built-in function: shout"):
            run_workflow(config_path)

    def test_parse_failure_recorded(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(files={"bad.json": "{nope"})

        result = run_workflow(config_path, force=True)

        assert result.files[0].failed_in == FileState.PARSING

    def test_unformattable_content_fails_only_that_file(
        self, make_workflow, list_logger: ListLogger
    ) -> None:
        wfconfig = (
            "import datetime\n"
            "input = {'parsers': {'txt': lambda text: {'when': datetime.date(2020, 1, 1)}}}\n"
        )
        config_path = make_workflow(
            files={"a.txt": "dated", "b.json": '{"ok": true}'}, wfconfig=wfconfig
        )

        result = run_workflow(config_path, force=True)

        failed, written = result.files
        assert failed.state == FileState.FAILED
        assert failed.failed_in == FileState.FORMATTING
        assert "not JSON serializable" in failed.error
        assert written.state == FileState.WRITTEN
        assert json.loads((_output_dir(config_path) / "b.json").read_text()) == {"ok": True}

    def test_unformattable_content_aborts_without_force(
        self, make_workflow, list_logger: ListLogger
    ) -> None:
        wfconfig = "input = {'parsers': {'txt': lambda text: {'raw': {1, 2}}}}\n"
        config_path = make_workflow(files={"a.txt": "x"}, wfconfig=wfconfig)

        with pytest.raises(WorkflowAbortedError) as exc_info:
            run_workflow(config_path)

        assert isinstance(exc_info.value.cause, ContentFormatError)


class TestCustomConfig:
    """wfconfig.py handling during a run."""

    def test_custom_parser_and_formatter(self, make_workflow, list_logger: ListLogger) -> None:
        wfconfig = (
            "input = {'parsers': {'txt': lambda text: text.split(',')}}\n"
            "output = {'formatters': {'txt': lambda value: '|'.join(value)}}\n"
        )
        config_path = make_workflow(steps=[UPPER_STEP], files={"a.txt": "x,y"}, wfconfig=wfconfig)

        run_workflow(config_path)

        assert (_output_dir(config_path) / "a.txt").read_text() == "X|Y"

    def test_broken_wfconfig_falls_back(self, make_workflow, list_logger: ListLogger) -> None:
        config_path = make_workflow(files={"a.json": "[1]"}, wfconfig="raise RuntimeError('broken')\n")

        result = run_workflow(config_path)

        assert result.processed_count == 1
        assert any("Failed to load custom configuration" in m for m in list_logger.messages("warning"))


class TestPolicy:
    """RunPolicy construction."""

    def test_from_force(self) -> None:
        assert RunPolicy.from_force(True) == RunPolicy(reprocess_existing=True, continue_on_error=True)
        assert RunPolicy.from_force(False) == RunPolicy()

    def test_explicit_policy_overrides_force(self, make_workflow) -> None:
        sandbox = MockSandbox(error=ScriptExecutionError("s.py", 1, "x"))
        config_path = make_workflow(steps=[SCRIPT_STEP], files={"a.txt": "a"})
        runner = WorkflowRunner(sandbox=sandbox, logger=ListLogger())

        with pytest.raises(WorkflowAbortedError):
            runner.run(config_path, force=True, policy=RunPolicy(reprocess_existing=True))


def test_container_uses_overrides(mock_sandbox: MockSandbox, list_logger: ListLogger) -> None:
    runner = Container.workflow_runner(timeout=3)
    assert runner._sandbox is mock_sandbox
    assert runner._logger is list_logger
