from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
from typing import Callable, Dict, IO, Iterable, List, Optional, Tuple

from ..core.utils import get_logger
from .models import CommandSpec, ExecutionOutcome

BeforeAction = Callable[[], None]
AfterAction = Callable[[List[str], ExecutionOutcome], None]


class ExecutionError(RuntimeError):
    def __init__(self, message: str, outcome: Optional[ExecutionOutcome] = None):
        super().__init__(message)
        self.outcome = outcome


class CommandRunner:
    """Run a build tool invocation and echo its output as it is produced.

    Without a formatter the child's stdout and stderr are merged into one stream.
    With a formatter the child's stdout is connected to the formatter's stdin by an
    OS pipe, and what gets echoed and captured is the formatter's stdout. Either way
    the child's exit status decides success; the formatter's status is ignored.

    No timeout is applied: a hung build tool blocks the caller.
    """

    def __init__(
        self,
        formatter: Optional[str] = None,
        *,
        before_action: Optional[BeforeAction] = None,
        after_action: Optional[AfterAction] = None,
        stream: Optional[IO[str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.formatter = formatter
        self.before_action = before_action
        self.after_action = after_action
        self._stream = stream
        self._logger = get_logger(logger)

    @property
    def stream(self) -> IO[str]:
        # Resolved lazily so pytest's capsys replacement of sys.stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def execute(self, spec: CommandSpec) -> ExecutionOutcome:
        if self.before_action is not None:
            self.before_action()

        self._echo(spec.command_line(self.formatter))
        env = spec.child_env(dict(os.environ))

        if self.formatter:
            exit_code, output = self._run_with_formatter(spec, env)
        else:
            exit_code, output = self._run_merged(spec, env)

        outcome = ExecutionOutcome(command=list(spec.arguments), exit_code=exit_code, output=output)
        if not outcome.ok:
            self._logger.debug(f"{spec.arguments[0]} exited with status {exit_code}")
            raise ExecutionError(f"xcodebuild failed (exited with status: {exit_code})", outcome)

        if self.after_action is not None:
            self.after_action(output, outcome)
        return outcome

    def _run_merged(self, spec: CommandSpec, env: Dict[str, str]) -> Tuple[int, List[str]]:
        proc = subprocess.Popen(
            spec.arguments,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
        with proc:
            output = self._drain(proc.stdout)
        return proc.wait(), output

    def _run_with_formatter(self, spec: CommandSpec, env: Dict[str, str]) -> Tuple[int, List[str]]:
        primary = subprocess.Popen(spec.arguments, env=env, stdout=subprocess.PIPE)
        try:
            formatter = subprocess.Popen(
                shlex.split(self.formatter),
                stdin=primary.stdout,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError:
            primary.kill()
            primary.wait()
            raise
        finally:
            # The formatter owns the read end now; closing ours lets the child see SIGPIPE.
            primary.stdout.close()

        try:
            with formatter:
                output = self._drain(formatter.stdout)
        finally:
            formatter_code = formatter.wait()
            primary_code = primary.wait()
        self._logger.debug(f"formatter '{self.formatter}' exited with status {formatter_code}")
        return primary_code, output

    def _drain(self, lines: Iterable[str]) -> List[str]:
        output: List[str] = []
        for line in lines:
            line = line.rstrip("\n")
            self._echo(line)
            output.append(line)
        return output

    def _echo(self, line: str) -> None:
        print(line, file=self.stream, flush=True)


def capture_output(
    command: List[str],
    *,
    env: Optional[Dict[str, str]] = None,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Run `command` to completion and return its stdout (stderr is inherited)."""
    proc = subprocess.run(
        command,
        env=env,
        stdout=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )
    if proc.returncode != 0:
        get_logger(logger).debug(f"{' '.join(command)} exited with status {proc.returncode}")
    return proc.stdout or ""
