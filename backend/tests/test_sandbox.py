"""Tests for sandboxed code execution."""
import os
import shutil
import subprocess
import time

import pytest

from tests.conftest import local_sandbox
from vinstack.config import settings
from vinstack.services import sandbox_service
from vinstack.services.sandbox_service import UNAVAILABLE, CodeSandbox, ExecutionStatus


class TestCodeSandbox:

    def test_python_success(self, sandbox):
        result = sandbox.execute("print('Total:', 10 + 20)", "python")
        assert result.status == ExecutionStatus.success
        assert result.output == "Total: 30\n"
        assert result.execution_time_ms >= 0

    def test_python_error_exit(self, sandbox):
        result = sandbox.execute("print('before')\n1 / 0", "python")
        assert result.status == ExecutionStatus.error
        assert result.output == "before\n"
        assert "ZeroDivisionError" in result.error

    def test_silent_nonzero_exit(self, sandbox):
        result = sandbox.execute("raise SystemExit(3)", "python")
        assert result.status == ExecutionStatus.error
        assert result.error == "Process exited with code 3"

    def test_default_timeout_is_five_seconds(self):
        assert settings.SANDBOX_TIMEOUT_SECONDS == 5.0
        assert CodeSandbox().timeout == 5.0

    def test_timeout_kills_run(self):
        sandbox = local_sandbox(timeout=0.5)
        started = time.monotonic()
        result = sandbox.execute("import time\ntime.sleep(10)", "python")
        elapsed = time.monotonic() - started
        assert result.status == ExecutionStatus.timeout
        assert result.error == "Execution timeout"
        assert result.execution_time_ms == 500
        # killed at the deadline, not before it and not after the script's own sleep
        assert 0.5 <= elapsed < 10

    def test_environment_is_stripped(self, sandbox, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "do-not-leak")
        result = sandbox.execute("import os\nprint(os.environ.get('SECRET_KEY'))", "python")
        assert result.output == "None\n"

    def test_output_truncated(self):
        sandbox = local_sandbox(max_output_bytes=10)
        result = sandbox.execute("print('x' * 100)", "python")
        assert result.truncated is True
        assert result.output.startswith("x" * 10)
        assert result.output.endswith("(output truncated)")

    def test_output_limit_counts_bytes(self):
        sandbox = local_sandbox(max_output_bytes=10)
        # each character is two bytes in UTF-8
        result = sandbox.execute("print('é' * 100)", "python")
        assert result.truncated is True
        kept = result.output.split("\n... (output truncated)")[0]
        assert kept == "é" * 5
        assert len(kept.encode("utf-8")) <= 10

    def test_multibyte_output_under_limit_is_kept(self):
        sandbox = local_sandbox(max_output_bytes=12)
        result = sandbox.execute("print('é' * 5)", "python")
        assert result.truncated is False
        assert result.output == "é" * 5 + "\n"

    def test_markup_is_echoed(self, sandbox):
        html = "<h1>Hello</h1>"
        result = sandbox.execute(html, "html")
        assert result.status == ExecutionStatus.success
        assert result.output == html

    def test_unknown_language(self, sandbox):
        result = sandbox.execute("DISPLAY 'HI'.", "cobol")
        assert result.status == ExecutionStatus.error
        assert "not supported" in result.error

    def test_empty_code(self, sandbox):
        assert sandbox.execute("  ", "python").error == "No code to execute"

    def test_code_too_long(self):
        sandbox = local_sandbox(max_code_bytes=16)
        result = sandbox.execute("print('this is more than sixteen bytes')", "python")
        assert result.status == ExecutionStatus.error
        assert "too long" in result.error

    def test_missing_node_runtime(self):
        sandbox = local_sandbox(node_binary="definitely-not-node")
        result = sandbox.execute("console.log(1)", "javascript")
        assert result.status == ExecutionStatus.error
        assert "not available" in result.error

    @pytest.mark.skipif(shutil.which("node") is None, reason="node is not installed")
    def test_javascript_success(self):
        result = local_sandbox(timeout=10, node_binary="node").execute("console.log('Count:', 3)", "javascript")
        assert result.status == ExecutionStatus.success
        assert result.output == "Count: 3\n"


class _FakeDocker:
    """Stands in for the docker CLI and records every invocation."""

    def __init__(self, stdout=b"4\n", image_present=True, run_timeout=False):
        self.calls = []
        self.stdout = stdout
        self.image_present = image_present
        self.run_timeout = run_timeout

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        verb = cmd[1]
        if verb == "image":
            return subprocess.CompletedProcess(cmd, 0 if self.image_present else 1, b"", b"")
        if verb == "pull":
            self.image_present = True
            return subprocess.CompletedProcess(cmd, 0, b"", b"")
        if verb == "run" and self.run_timeout:
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])
        return subprocess.CompletedProcess(cmd, 0, self.stdout if verb == "run" else b"", b"")

    def verbs(self):
        return [c[1] if c[1] != "image" else "inspect" for c in self.calls]

    def run_command(self):
        return next(c for c in self.calls if c[1] == "run")


@pytest.fixture
def fake_docker(monkeypatch):
    fake = _FakeDocker()
    monkeypatch.setattr(sandbox_service.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(sandbox_service.subprocess, "run", fake)
    return fake


class TestDockerBackend:

    def test_runs_in_locked_down_container(self, fake_docker):
        result = CodeSandbox(timeout=5).execute("print(2 + 2)", "python")
        assert result.status == ExecutionStatus.success
        assert result.output == "4\n"

        cmd = fake_docker.run_command()
        for flag in ("--rm", "--network=none", "--read-only", "--cap-drop=ALL", "--user=nobody",
                     "--security-opt=no-new-privileges", "--ipc=none",
                     f"--memory={settings.SANDBOX_MEMORY_MB}m",
                     f"--pids-limit={settings.SANDBOX_PIDS_LIMIT}"):
            assert flag in cmd
        mount = cmd[cmd.index("-v") + 1]
        assert mount.endswith(":/app:ro")
        assert cmd[-3:] == [settings.SANDBOX_DOCKER_PYTHON_IMAGE, "python", "/app/main.py"]

    def test_javascript_uses_node_image(self, fake_docker):
        CodeSandbox(timeout=5).execute("console.log(4)", "javascript")
        cmd = fake_docker.run_command()
        assert cmd[-3:] == [settings.SANDBOX_DOCKER_NODE_IMAGE, "node", "/app/main.js"]

    def test_missing_image_is_pulled_once(self, fake_docker):
        fake_docker.image_present = False
        sandbox = CodeSandbox(timeout=5)
        sandbox.execute("print(1)", "python")
        sandbox.execute("print(2)", "python")
        assert fake_docker.verbs().count("pull") == 1
        assert fake_docker.verbs().count("run") == 2

    def test_timeout_removes_container(self, fake_docker):
        fake_docker.run_timeout = True
        result = CodeSandbox(timeout=1).execute("while True: pass", "python")
        assert result.status == ExecutionStatus.timeout
        assert result.execution_time_ms == 1000

        name = next(a for a in fake_docker.run_command() if a.startswith("--name=")).split("=", 1)[1]
        assert fake_docker.calls[-1] == ["docker", "rm", "-f", name]

    def test_docker_availability_checked_once(self, fake_docker):
        sandbox = CodeSandbox(timeout=5)
        assert fake_docker.calls == []
        sandbox.execute("print(1)", "python")
        sandbox.execute("print(1)", "python")
        assert fake_docker.verbs().count("version") == 1


class TestFailClosed:

    def test_refuses_without_docker_by_default(self, monkeypatch):
        def _no_subprocess(*args, **kwargs):
            raise AssertionError("nothing may be spawned")

        monkeypatch.setattr(sandbox_service.subprocess, "run", _no_subprocess)
        sandbox = CodeSandbox(docker_binary="definitely-not-docker")
        assert sandbox.allow_fallback is False
        result = sandbox.execute("print(1)", "python")
        assert result.status == ExecutionStatus.error
        assert result.error == UNAVAILABLE

    def test_fallback_needs_opt_in(self):
        sandbox = CodeSandbox(use_docker=False)
        assert sandbox.execute("print(1)", "python").error == UNAVAILABLE

    def test_endpoint_fails_closed(self, client, sandbox):
        sandbox.allow_fallback = False
        resp = client.post("/api/sandbox/execute", json={"code": "print(1)", "language": "python"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "error"
        assert resp.json()["error"] == UNAVAILABLE


class TestLocalFallback:

    def test_runs_in_own_session(self, sandbox):
        result = sandbox.execute("import os\nprint(os.getsid(0) == os.getpid())", "python")
        assert result.output == "True\n"

    def test_memory_is_capped(self, sandbox):
        result = sandbox.execute("blob = bytearray(2 * 1024 ** 3)\nprint('allocated')", "python")
        assert result.status == ExecutionStatus.error
        assert "MemoryError" in result.error

    @pytest.mark.skipif(os.geteuid() != 0, reason="dropping privileges needs root")
    def test_parent_environment_unreadable_as_unprivileged_user(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "do-not-leak")
        sandbox = local_sandbox(run_as="nobody")
        code = (
            "import os\n"
            "try:\n"
            "    data = open(f'/proc/{os.getppid()}/environ', 'rb').read()\n"
            "    print('leaked' if b'do-not-leak' in data else 'clean')\n"
            "except PermissionError:\n"
            "    print('blocked')\n"
            "print(os.getuid())\n"
        )
        result = sandbox.execute(code, "python")
        if "could not be started" in result.error:
            pytest.skip("interpreter is not reachable by the unprivileged user")
        lines = result.output.splitlines()
        assert lines[0] in ("blocked", "clean")
        assert int(lines[1]) != 0


class TestExecuteEndpoint:

    def test_execute_python(self, client):
        resp = client.post("/api/sandbox/execute", json={"code": "print(2 + 2)", "language": "python"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["output"] == "4\n"

    def test_execute_reports_errors_in_body(self, client):
        resp = client.post("/api/sandbox/execute", json={"code": "x", "language": "ruby"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "error"
