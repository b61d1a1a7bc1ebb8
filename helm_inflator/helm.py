"""Library for running `helm` to fetch and render a chart into manifests.

A `Helm` instance wraps a resolved `GeneratorConfig` and issues the helm
commands for each step of inflating a chart:
```python
from helm_inflator.config import resolve
from helm_inflator.helm import Helm

config, workdir = resolve({"chartName": "nginx", "chartRepoUrl": "https://charts.example.com"})
with workdir:
    helm = Helm(config)
    await helm.check_version()
    await helm.ensure_chart()
    manifests = await helm.template()
```

Every command runs with `HELM_CONFIG_HOME`, `HELM_CACHE_HOME` and
`HELM_DATA_HOME` pointed at the configured helm home so that repository
configuration and credentials of the host are never used.
"""

import logging
import re
from typing import cast

from aiofiles.ospath import isdir

from .command import Command, ProcessRunner, SubprocessRunner
from .config import GeneratorConfig
from .context import trace_context
from .exceptions import (
    HelmException,
    HelmFetchException,
    HelmRenderException,
    HelmVersionException,
)

__all__ = [
    "Helm",
    "parse_version",
]

_LOGGER = logging.getLogger(__name__)


SUPPORTED_MAJOR_VERSION = "3"

# Matches the semantic version reported by `helm version --short` e.g. v3.14.2+gc309b6f
_VERSION_RE = re.compile(r"v\d+(\.\d+)+")


def parse_version(output: str) -> str:
    """Return the version in the helm version output, without the leading `v`."""
    if not (match := _VERSION_RE.search(output)):
        raise HelmVersionException(
            f"Unable to parse helm version from output: {output.strip()!r}"
        )
    return match.group(0)[1:]


class Helm:
    """Issues helm commands for a single generator config."""

    def __init__(
        self, config: GeneratorConfig, runner: ProcessRunner | None = None
    ) -> None:
        """Initialize Helm."""
        self._config = config
        self._runner = runner or SubprocessRunner()

    def _command(self, args: list[str], exc: type[HelmException]) -> Command:
        return Command(
            [cast(str, self._config.helm_bin)] + args,
            exc=exc,
            env=self._config.helm_env,
        )

    def version_args(self) -> list[str]:
        """Arguments for querying the client version."""
        return ["version", "-c", "--short"]

    async def check_version(self) -> str:
        """Verify the helm binary is helm v3, returning the version."""
        with trace_context("helm version", self._config.chart_name):
            out = await self._runner.run(
                self._command(self.version_args(), HelmException)
            )
        version = parse_version(out.decode("utf-8", errors="replace"))
        major_version = version.split(".")[0]
        if major_version != SUPPORTED_MAJOR_VERSION:
            raise HelmVersionException(
                f"This generator requires helm v{SUPPORTED_MAJOR_VERSION} but got v{version}",
                version=version,
            )
        _LOGGER.debug("Using helm v%s", version)
        return version

    async def has_local_chart(self) -> bool:
        """Return true if the chart directory already exists in the chart home.

        The contents of an existing directory are not verified.
        """
        return await isdir(self._config.chart_dir)

    def pull_args(self) -> list[str]:
        """Arguments for fetching the chart into the chart home."""
        config = self._config
        args = ["pull", "--untar", "--untardir", cast(str, config.chart_home)]
        chart_ref = f"{config.chart_repo_name}/{config.chart_name}"
        if config.chart_version:
            args.extend(["--version", config.chart_version])
        if config.chart_repo_url:
            # The repository url replaces the repository name prefix
            args.extend(["--repo", config.chart_repo_url])
            chart_ref = cast(str, config.chart_name)
        args.append(chart_ref)
        return args

    async def pull(self) -> None:
        """Fetch and unpack the chart into the chart home."""
        with trace_context("helm pull", self._config.chart_name):
            await self._runner.run(self._command(self.pull_args(), HelmFetchException))

    async def ensure_chart(self) -> bool:
        """Fetch the chart unless it is already present, returning true if fetched."""
        if await self.has_local_chart():
            _LOGGER.debug("Using local chart %s", self._config.chart_dir)
            return False
        await self.pull()
        return True

    def template_args(self) -> list[str]:
        """Arguments for rendering the local chart."""
        config = self._config
        args = ["template"]
        if config.release_name:
            args.append(config.release_name)
        args.append(config.chart_dir)
        if config.release_namespace:
            args.extend(["--namespace", config.release_namespace])
        if config.values:
            args.extend(["--values", config.values])
        if config.extra_args:
            args.extend(config.extra_args)
        return args

    async def template(self) -> bytes:
        """Render the local chart, returning the manifests as YAML."""
        with trace_context("helm template", self._config.chart_name):
            return await self._runner.run(
                self._command(self.template_args(), HelmRenderException)
            )
