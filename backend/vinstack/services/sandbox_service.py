"""Sandboxed code execution.

Untrusted code never runs inside the API process. The primary backend is a
throw-away Docker container with no network, a read-only root filesystem,
memory and pid limits, every capability dropped and an unprivileged user.
The code is bind-mounted read-only at ``/app``.

When Docker is missing, execution fails closed unless
``SANDBOX_ALLOW_FALLBACK`` is set. The fallback runs the script as a local
child process in its own session, under resource limits, with a stripped
environment and, when the API runs as root, as ``SANDBOX_FALLBACK_USER``.
It is meant for development machines only.

A single wall-clock timeout applies to every run; a script that does not
finish in time is killed and reported as ``timeout``.

Markup languages (HTML/CSS) have nothing to execute and are echoed back for
preview.
"""
from __future__ import annotations

import enum
import logging
import math
import os
import pwd
import resource
import shutil
import subprocess
import sys
import tempfile
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from vinstack.config import settings

logger = logging.getLogger(__name__)


class ExecutionStatus(str, enum.Enum):
    success = "success"
    error = "error"
    timeout = "timeout"


@dataclass
class ExecutionResult:
    status: ExecutionStatus
    output: str = ""
    error: str = ""
    execution_time_ms: int = 0
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "output": self.output,
            "error": self.error,
            "execution_time_ms": self.execution_time_ms,
        }


MARKUP_LANGUAGES = ("html", "css")
RUNNABLE_LANGUAGES = ("python", "javascript")
SCRIPT_NAMES = {"python": "main.py", "javascript": "main.js"}

CONTAINER_LABEL = "vinstack.sandbox=1"
# container start-up overhead on top of the run timeout
DOCKER_GRACE_SECONDS = 2.0
DOCKER_CHECK_TIMEOUT = 5
MAX_FILE_WRITE_BYTES = 1024 * 1024

UNAVAILABLE = "Code execution is unavailable on this server"


def _error(message: str) -> ExecutionResult:
    return ExecutionResult(status=ExecutionStatus.error, error=message)


class CodeSandbox:
    """Runs snippets of Python or JavaScript outside the API process."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_code_bytes: Optional[int] = None,
        max_output_bytes: Optional[int] = None,
        node_binary: Optional[str] = None,
        use_docker: Optional[bool] = None,
        allow_fallback: Optional[bool] = None,
        run_as: Optional[str] = None,
        docker_binary: Optional[str] = None,
    ):
        self.timeout = settings.SANDBOX_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_code_bytes = max_code_bytes or settings.SANDBOX_MAX_CODE_BYTES
        self.max_output_bytes = max_output_bytes or settings.SANDBOX_MAX_OUTPUT_BYTES
        self.node_binary = node_binary or settings.SANDBOX_NODE_BINARY
        self.use_docker = settings.SANDBOX_USE_DOCKER if use_docker is None else use_docker
        self.allow_fallback = settings.SANDBOX_ALLOW_FALLBACK if allow_fallback is None else allow_fallback
        self.run_as = settings.SANDBOX_FALLBACK_USER if run_as is None else run_as
        self.docker_binary = docker_binary or settings.SANDBOX_DOCKER_BINARY
        self.images = {
            "python": settings.SANDBOX_DOCKER_PYTHON_IMAGE,
            "javascript": settings.SANDBOX_DOCKER_NODE_IMAGE,
        }
        self.memory_mb = settings.SANDBOX_MEMORY_MB
        self.pids_limit = settings.SANDBOX_PIDS_LIMIT
        # resolved lazily so constructing a sandbox never shells out
        self._docker_available: Optional[bool] = None
        self._ready_images: set[str] = set()

    # -------------------- Validation --------------------

    def validate(self, code: str, language: str) -> Optional[str]:
        """Return an error message, or None when the code may run."""
        if not code or not code.strip():
            return "No code to execute"
        if len(code.encode("utf-8")) > self.max_code_bytes:
            return f"Code is too long (max {self.max_code_bytes // 1024}KB)"
        if language not in RUNNABLE_LANGUAGES and language not in MARKUP_LANGUAGES:
            return f"Execution is not supported for language '{language}'"
        return None

    def _truncate(self, raw: bytes) -> tuple[str, bool]:
        if len(raw) <= self.max_output_bytes:
            return raw.decode("utf-8", errors="replace"), False
        # a multi-byte character split at the cut is dropped
        head = raw[: self.max_output_bytes].decode("utf-8", errors="ignore")
        return head + "\n... (output truncated)", True

    # -------------------- Docker --------------------

    def docker_available(self) -> bool:
        if self._docker_available is None:
            self._docker_available = self._check_docker()
        return self._docker_available

    def _check_docker(self) -> bool:
        if shutil.which(self.docker_binary) is None:
            return False
        try:
            result = subprocess.run(
                [self.docker_binary, "version"],
                capture_output=True,
                timeout=DOCKER_CHECK_TIMEOUT,
                check=False,
            )
        except (subprocess.SubprocessError, OSError):
            return False
        return result.returncode == 0

    def _ensure_image(self, image: str) -> Optional[str]:
        """Make sure ``image`` is present locally; returns an error message on failure."""
        if image in self._ready_images:
            return None
        try:
            inspect = subprocess.run(
                [self.docker_binary, "image", "inspect", image],
                capture_output=True,
                timeout=DOCKER_CHECK_TIMEOUT,
                check=False,
            )
            if inspect.returncode != 0:
                pull = subprocess.run(
                    [self.docker_binary, "pull", image],
                    capture_output=True,
                    timeout=settings.SANDBOX_DOCKER_PULL_TIMEOUT,
                    check=False,
                )
                if pull.returncode != 0:
                    logger.error("Pulling sandbox image %s failed: %s", image,
                                 pull.stderr.decode("utf-8", errors="replace").strip()[:200])
                    return "Sandbox image is not available"
        except subprocess.TimeoutExpired:
            logger.error("Pulling sandbox image %s timed out", image)
            return "Sandbox image is not available"
        except (subprocess.SubprocessError, OSError):
            logger.exception("Docker failed while preparing image %s", image)
            return "Sandbox image is not available"
        self._ready_images.add(image)
        return None

    def docker_command(self, language: str, workdir: str, container_name: str) -> list[str]:
        image = self.images[language]
        runtime = "python" if language == "python" else "node"
        return [
            self.docker_binary,
            "run",
            "--rm",
            f"--name={container_name}",
            f"--label={CONTAINER_LABEL}",
            "--network=none",
            "--read-only",
            "--tmpfs=/tmp:rw,noexec,nosuid,size=10m",
            f"--memory={self.memory_mb}m",
            f"--memory-swap={self.memory_mb}m",
            "--cpus=0.5",
            f"--pids-limit={self.pids_limit}",
            "--ipc=none",
            "--security-opt=no-new-privileges",
            "--cap-drop=ALL",
            "--user=nobody",
            "--env=HOME=/tmp",
            "-v",
            f"{workdir}:/app:ro",
            image,
            runtime,
            f"/app/{SCRIPT_NAMES[language]}",
        ]

    def _cleanup_container(self, container_name: str) -> None:
        try:
            subprocess.run(
                [self.docker_binary, "rm", "-f", container_name],
                capture_output=True,
                timeout=DOCKER_CHECK_TIMEOUT,
                check=False,
            )
        except (subprocess.SubprocessError, OSError):
            logger.warning("Could not remove sandbox container %s", container_name)

    def _run_docker(self, language: str, workdir: str) -> ExecutionResult:
        error = self._ensure_image(self.images[language])
        if error:
            return _error(error)

        container_name = f"vinstack-exec-{uuid.uuid4().hex[:12]}"
        cmd = self.docker_command(language, workdir, container_name)
        started = time.monotonic()
        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout + DOCKER_GRACE_SECONDS,
                check=False,
            )
        except subprocess.TimeoutExpired:
            # killing the docker client does not stop the container
            self._cleanup_container(container_name)
            return self._timed_out(language)
        except OSError:
            logger.exception("Could not start docker for a %s run", language)
            return _error(UNAVAILABLE)
        return self._finish(proc, language, started, backend="docker")

    # -------------------- Local fallback --------------------

    def _local_command(self, language: str, script_path: str) -> Optional[list[str]]:
        if language == "python":
            # -I: ignore PYTHON* env vars and user site-packages
            return [sys.executable, "-I", script_path]
        node = shutil.which(self.node_binary)
        if node is None:
            return None
        return [node, script_path]

    def _fallback_account(self) -> Optional[pwd.struct_passwd]:
        """The account to drop to, or None when the API is not privileged."""
        if not self.run_as or os.geteuid() != 0:
            return None
        return pwd.getpwnam(self.run_as)

    def _resource_limits(self, language: str, drop_privileges: bool) -> Callable[[], None]:
        cpu_seconds = int(math.ceil(self.timeout)) + 1
        limits = [
            (resource.RLIMIT_CPU, cpu_seconds),
            (resource.RLIMIT_FSIZE, MAX_FILE_WRITE_BYTES),
            (resource.RLIMIT_CORE, 0),
        ]
        if language == "python":
            # node reserves far more address space than it uses
            limits.append((resource.RLIMIT_AS, self.memory_mb * 1024 * 1024))
        if drop_privileges:
            # counted per user, so only meaningful for the dedicated account
            limits.append((resource.RLIMIT_NPROC, self.pids_limit))

        def apply() -> None:
            for which, value in limits:
                resource.setrlimit(which, (value, value))

        return apply

    def _run_local(self, language: str, workdir: str, script_path: str) -> ExecutionResult:
        cmd = self._local_command(language, script_path)
        if cmd is None:
            logger.warning("No runtime available for %s (looked for %s)", language, self.node_binary)
            return _error(f"Runtime for {language} is not available on this server")

        try:
            account = self._fallback_account()
        except KeyError:
            logger.error("Sandbox fallback user %r does not exist", self.run_as)
            return _error(UNAVAILABLE)

        extra: dict[str, Any] = {}
        if account is not None:
            extra = {"user": account.pw_uid, "group": account.pw_gid, "extra_groups": []}

        env = {"PATH": os.environ.get("PATH", ""), "HOME": workdir, "LANG": "C.UTF-8"}
        logger.warning("Running %s code through the local fallback", language)
        started = time.monotonic()
        try:
            proc = subprocess.run(
                cmd,
                cwd=workdir,
                env=env,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout,
                check=False,
                start_new_session=True,
                preexec_fn=self._resource_limits(language, account is not None),
                **extra,
            )
        except subprocess.TimeoutExpired:
            # subprocess.run has already killed and reaped the child
            return self._timed_out(language)
        except (OSError, subprocess.SubprocessError):
            logger.exception("Could not start the local %s runtime", language)
            return _error(f"Runtime for {language} could not be started")
        return self._finish(proc, language, started, backend="local")

    # -------------------- Execution --------------------

    def _backend(self) -> Optional[str]:
        if self.use_docker and self.docker_available():
            return "docker"
        if self.allow_fallback:
            return "local"
        return None

    def _timed_out(self, language: str) -> ExecutionResult:
        logger.warning("Sandbox run for %s timed out after %.1fs", language, self.timeout)
        return ExecutionResult(
            status=ExecutionStatus.timeout,
            error="Execution timeout",
            execution_time_ms=int(self.timeout * 1000),
        )

    def _finish(self, proc: subprocess.CompletedProcess, language: str, started: float,
                backend: str) -> ExecutionResult:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        stdout, out_trunc = self._truncate(proc.stdout)
        stderr, err_trunc = self._truncate(proc.stderr)

        # metadata only, never the code or its output
        logger.info("Sandbox run: backend=%s language=%s exit=%s time=%dms",
                    backend, language, proc.returncode, elapsed_ms)

        if proc.returncode != 0:
            return ExecutionResult(
                status=ExecutionStatus.error,
                output=stdout,
                error=stderr.strip() or f"Process exited with code {proc.returncode}",
                execution_time_ms=elapsed_ms,
                truncated=out_trunc or err_trunc,
            )
        return ExecutionResult(
            status=ExecutionStatus.success,
            output=stdout,
            error=stderr,
            execution_time_ms=elapsed_ms,
            truncated=out_trunc or err_trunc,
        )

    def execute(self, code: str, language: str) -> ExecutionResult:
        language = (language or "").strip().lower()
        error = self.validate(code, language)
        if error:
            return _error(error)

        if language in MARKUP_LANGUAGES:
            return ExecutionResult(status=ExecutionStatus.success, output=code)

        backend = self._backend()
        if backend is None:
            logger.warning("Refusing a %s run: Docker is unavailable and the local fallback is disabled", language)
            return _error(UNAVAILABLE)

        with tempfile.TemporaryDirectory(prefix="vinstack-sandbox-") as workdir:
            # readable, not writable, by the unprivileged runner
            os.chmod(workdir, 0o755)
            script_path = os.path.join(workdir, SCRIPT_NAMES[language])
            with open(script_path, "w", encoding="utf-8") as fh:
                fh.write(code)
            os.chmod(script_path, 0o644)

            if backend == "docker":
                return self._run_docker(language, workdir)
            return self._run_local(language, workdir, script_path)
