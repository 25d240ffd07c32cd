"""Wrapper around the external LaTeX toolchain (``latexmk`` by default)."""

import logging
import os
import subprocess
from pathlib import Path

from .exceptions import CompileError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "latexmk"
DEFAULT_ARGS = ["-pdflua", "-interaction=nonstopmode"]
DEFAULT_CLEAN_ARGS = ["-c"]


class LatexCompiler:
    """Compile a ``.tex`` file and clean up the auxiliary files afterwards.

    Both steps are a single blocking subprocess call.  Nothing is retried;
    a non-zero exit, a missing executable or an expired *timeout* (seconds,
    None for no limit) raises :class:`~songsheet.exceptions.CompileError`.
    """

    def __init__(
        self,
        command: str = DEFAULT_COMMAND,
        args: list[str] | None = None,
        clean_args: list[str] | None = None,
        timeout: float | None = None,
        cwd: Path | None = None,
    ):
        self.command = command
        self.args = list(DEFAULT_ARGS if args is None else args)
        self.clean_args = list(DEFAULT_CLEAN_ARGS if clean_args is None else clean_args)
        self.timeout = timeout
        self.cwd = cwd

    def compile(self, tex_path: Path) -> int:
        # the command runs in cwd, so the target must be relative to it
        target = str(tex_path) if self.cwd is None else os.path.relpath(tex_path, self.cwd)
        return self._run([self.command, *self.args, target])

    def clean(self) -> int:
        return self._run([self.command, *self.clean_args])

    def _run(self, cmd: list[str]) -> int:
        logger.info("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, cwd=self.cwd, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise CompileError(cmd, None, f"timed out after {self.timeout}s") from exc
        except OSError as exc:
            raise CompileError(cmd, None, str(exc)) from exc
        if result.returncode != 0:
            raise CompileError(cmd, result.returncode)
        return result.returncode
