"""Fixtures for helm-inflator tests."""

from collections.abc import Generator
from pathlib import Path
import stat

import pytest

from helm_inflator.command import Command, ProcessRunner

HELM_VERSION_OUTPUT = b"v3.14.2+gc309b6f\n"

TEMPLATE_OUTPUT = b"""---
# Source: nginx/templates/service.yaml
apiVersion: v1
kind: Service
metadata:
  name: nginx
---
# Source: nginx/templates/deployment.yaml
apiVersion: apps/v1
kind: Deployment
metadata:
  name: nginx
"""

# A stand in for the helm binary. It records each invocation, reports a
# version and implements just enough of `pull` and `template`.
FAKE_HELM = """#!/bin/sh
printf '%s\\n' "$*" >> "{log}"
if [ "$FAKE_HELM_FAIL" = "$1" ]; then
  echo "Error: $1 failed" >&2
  exit 1
fi
case "$1" in
  version)
    echo "${{FAKE_HELM_VERSION:-v3.14.2+gc309b6f}}"
    ;;
  pull)
    prev=""
    for arg in "$@"; do
      if [ "$prev" = "--untardir" ]; then untardir="$arg"; fi
      prev="$arg"
    done
    name="${{prev##*/}}"
    mkdir -p "$untardir/$name/templates"
    echo "replicaCount: 1" > "$untardir/$name/values.yaml"
    ;;
  template)
    cat <<YAML
---
apiVersion: v1
kind: ConfigMap
metadata:
  name: helm-env
data:
  configHome: "$HELM_CONFIG_HOME"
  cacheHome: "$HELM_CACHE_HOME"
  dataHome: "$HELM_DATA_HOME"
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: nginx
YAML
    ;;
  *)
    echo "Error: unknown command \\"$1\\"" >&2
    exit 1
    ;;
esac
"""


class FakeRunner(ProcessRunner):
    """A ProcessRunner that records commands and returns canned output.

    Output and failures are keyed by the helm subcommand e.g. `pull`.
    """

    def __init__(
        self,
        outputs: dict[str, bytes] | None = None,
        failures: dict[str, str] | None = None,
    ) -> None:
        self.outputs = {
            "version": HELM_VERSION_OUTPUT,
            "template": TEMPLATE_OUTPUT,
            **(outputs or {}),
        }
        self.failures = failures or {}
        self.commands: list[Command] = []

    @property
    def subcommands(self) -> list[str]:
        return [cmd.cmd[1] for cmd in self.commands]

    def args(self, subcommand: str) -> list[str]:
        """Return the arguments of the first command for the subcommand."""
        for cmd in self.commands:
            if cmd.cmd[1] == subcommand:
                return cmd.cmd[1:]
        raise AssertionError(f"No {subcommand} command in {self.subcommands}")

    async def run(self, cmd: Command) -> bytes:
        self.commands.append(cmd)
        subcommand = cmd.cmd[1]
        if (stderr := self.failures.get(subcommand)) is not None:
            raise cmd.exc(
                f"Command '{cmd}' failed with return code 1\n{stderr}",
                cmd=cmd.string,
                stderr=stderr,
            )
        return self.outputs.get(subcommand, b"")


@pytest.fixture(name="runner")
def runner_fixture() -> FakeRunner:
    """Fixture for a runner that succeeds for every helm command."""
    return FakeRunner()


@pytest.fixture(name="helm_log")
def helm_log_fixture(tmp_path: Path) -> Path:
    """Path of the file the fake helm binary records invocations in."""
    return tmp_path / "helm-calls.log"


@pytest.fixture(name="fake_helm")
def fake_helm_fixture(tmp_path: Path, helm_log: Path) -> Generator[Path, None, None]:
    """Fixture for an executable fake helm binary."""
    helm_bin = tmp_path / "bin" / "helm"
    helm_bin.parent.mkdir()
    helm_bin.write_text(FAKE_HELM.format(log=helm_log))
    helm_bin.chmod(helm_bin.stat().st_mode | stat.S_IXUSR)
    yield helm_bin
