"""
Unit tests for the process runner, using the current interpreter as the child process.
"""
import sys

import pytest
from d2e.MODELS.command import CommandKind, Invocation
from d2e.RUNNERS.process_runner import CommandFailedError, ProcessRunner


def python(code, stdin=None):
    return Invocation(program=sys.executable, args=("-c", code), kind=CommandKind.INFO, stdin=stdin)


class TestProcessRunner:
    """Tests for ProcessRunner."""

    def test_run_success(self):
        ProcessRunner().run(python("pass"))

    def test_run_failure_raises(self):
        with pytest.raises(CommandFailedError) as excinfo:
            ProcessRunner().run(python("raise SystemExit(3)"))
        assert excinfo.value.returncode == 3
        assert str(excinfo.value) == "exit status 3"

    def test_run_pipes_stdin(self):
        code = "import sys; sys.exit(0 if sys.stdin.read() == 's3cret' else 1)"
        ProcessRunner().run(python(code, stdin="s3cret"))

    def test_missing_program_raises(self):
        invocation = Invocation(program="/nonexistent/docker", args=("info",), kind=CommandKind.INFO)
        with pytest.raises(CommandFailedError) as excinfo:
            ProcessRunner().run(invocation)
        assert excinfo.value.returncode is None

    def test_succeeds(self):
        runner = ProcessRunner()
        assert runner.succeeds(python("print('quiet')")) is True
        assert runner.succeeds(python("raise SystemExit(1)")) is False
        missing = Invocation(program="/nonexistent/docker", args=("info",), kind=CommandKind.INFO)
        assert runner.succeeds(missing) is False

    def test_start_background_does_not_wait(self):
        runner = ProcessRunner()
        runner.start_background(python("import time; time.sleep(5)"))
        process = runner._background[0]
        assert process.poll() is None
        process.kill()
        process.wait()

    def test_start_background_missing_program(self, capsys):
        invocation = Invocation(program="/nonexistent/dockerd", args=(), kind=CommandKind.DAEMON)
        ProcessRunner().start_background(invocation)
        assert "Failed to start /nonexistent/dockerd" in capsys.readouterr().out
