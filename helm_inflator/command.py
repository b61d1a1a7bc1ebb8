"""Library for issuing commands using asyncio and returning the result.

A `Command` is a single request to execute a binary with a list of arguments
and a set of environment variables added to the current environment. Commands
are executed by a `ProcessRunner` so that callers can substitute the way
processes are launched (e.g. in tests):
```python
from helm_inflator.command import Command, SubprocessRunner

out = await SubprocessRunner().run(Command(["helm", "version", "--short"]))
```
"""

import asyncio
from abc import ABC, abstractmethod
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass

from .exceptions import CommandException

__all__ = [
    "Command",
    "ProcessRunner",
    "SubprocessRunner",
]

_LOGGER = logging.getLogger(__name__)

_TIMEOUT = 300.0


@dataclass
class Command:
    """An instance of a command to run."""

    cmd: list[str]
    """Array of command line arguments, starting with the binary."""

    exc: type[CommandException] = CommandException
    """Exception to throw in case of an error."""

    env: dict[str, str] | None = None
    """Environment variables added to the environment of the subprocess."""

    @property
    def string(self) -> str:
        """Render the command as a single string."""
        return " ".join([shlex.quote(arg) for arg in self.cmd])

    def __str__(self) -> str:
        """Render as a debug string."""
        return self.string

    async def run(self) -> bytes:
        """Run the command, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        env = {
            **os.environ,
            **(self.env if self.env else {}),
        }
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=env,
            )
        except OSError as err:
            raise self.exc(
                f"Command '{self}' failed to start: {err}",
                cmd=self.string,
                stderr=str(err),
            ) from err
        try:
            out, err = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            raise
        if proc.returncode:
            stderr = err.decode("utf-8", errors="replace")
            errors = [f"Command '{self}' failed with return code {proc.returncode}"]
            if stderr:
                errors.append(stderr)
            _LOGGER.debug("\n".join(errors))
            raise self.exc("\n".join(errors), cmd=self.string, stderr=stderr)
        return out


class ProcessRunner(ABC):
    """Executes a `Command` and returns its standard output."""

    @abstractmethod
    async def run(self, cmd: Command) -> bytes:
        """Execute the command and return stdout."""


class SubprocessRunner(ProcessRunner):
    """Runs commands as local subprocesses with a deadline."""

    def __init__(self, timeout: float = _TIMEOUT) -> None:
        """Initialize SubprocessRunner."""
        self._timeout = timeout

    async def run(self, cmd: Command) -> bytes:
        """Run the command, raising the command's exception on timeout."""
        try:
            return await asyncio.wait_for(cmd.run(), self._timeout)
        except asyncio.TimeoutError as err:
            raise cmd.exc(f"Command '{cmd}' timed out", cmd=cmd.string) from err
