"""Generator that inflates a helm chart into kubernetes resources.

The generator is configured once and then generates once:
```python
from helm_inflator.generator import HelmChartInflationGenerator

generator = HelmChartInflationGenerator()
generator.config(config_yaml)
for object in await generator.objects():
    print(f"Found object {object['apiVersion']} {object['kind']}")
```

A generate run checks the helm version, pulls the chart unless it already
exists in the chart home and renders it with `helm template`. The working
directory allocated by `config` is always removed when the run finishes.
"""

import logging
from typing import Any

import yaml

from .command import ProcessRunner
from .config import GeneratorConfig, WorkingDirectory, resolve
from .context import trace_context
from .exceptions import HelmRenderException, InputException
from .helm import Helm

__all__ = [
    "HelmChartInflationGenerator",
]

_LOGGER = logging.getLogger(__name__)


class HelmChartInflationGenerator:
    """Generates resources from a remote or local helm chart."""

    def __init__(self, runner: ProcessRunner | None = None) -> None:
        """Initialize HelmChartInflationGenerator."""
        self._runner = runner
        self._config: GeneratorConfig | None = None
        self._workdir: WorkingDirectory | None = None

    @property
    def generator_config(self) -> GeneratorConfig:
        """Return the resolved configuration."""
        if self._config is None:
            raise InputException("Generator has not been configured")
        return self._config

    def config(self, raw: str | bytes | dict[str, Any]) -> None:
        """Set up the generator options from the raw plugin configuration."""
        if self._workdir is not None:
            self._workdir.cleanup()
            self._workdir = None
        self._config = None
        self._config, self._workdir = resolve(raw)

    async def generate(self) -> bytes:
        """Inflate the chart and return the rendered manifests as YAML."""
        config = self.generator_config
        if self._workdir is None:
            raise InputException(
                f"Generator for chart {config.chart_name} has already run"
            )
        workdir, self._workdir = self._workdir, None
        helm = Helm(config, self._runner)
        with workdir, trace_context("generate", config.chart_name):
            await helm.check_version()
            if await helm.ensure_chart():
                _LOGGER.info("Pulled chart %s", config.chart_name)
            return await helm.template()

    async def objects(self) -> list[dict[str, Any]]:
        """Inflate the chart and return the rendered objects."""
        out = await self.generate()
        try:
            return [
                doc
                for doc in yaml.safe_load_all(out)
                if doc is not None
            ]
        except yaml.YAMLError as err:
            raise HelmRenderException(
                f"Unable to parse helm template output for chart {self.generator_config.chart_name}: {err}"
            ) from err
