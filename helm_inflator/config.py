"""Configuration objects for the helm chart inflation generator.

A generator configuration is the document handed to the generator by the
host, typically a kustomize generator plugin config:
```yaml
apiVersion: builtin
kind: HelmChartInflationGenerator
metadata:
  name: nginx
chartName: nginx
chartRepoUrl: https://charts.example.com
chartVersion: 1.2.3
releaseName: web
releaseNamespace: prod
```

The `resolve` function parses the document, allocates a private working
directory for the run and fills in defaults rooted in that directory.
"""

import dataclasses
from dataclasses import dataclass, field
import logging
from pathlib import Path
import shutil
import tempfile
from typing import Any, cast

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig
from mashumaro.exceptions import (
    ExtraKeysError,
    InvalidFieldValue,
    MissingField,
)
import yaml

from .exceptions import MalformedConfigException, MissingChartNameException

__all__ = [
    "GeneratorConfig",
    "ObjectMeta",
    "WorkingDirectory",
    "resolve",
]

_LOGGER = logging.getLogger(__name__)


HELM_BIN = "helm"
DEFAULT_CHART_REPO_NAME = "stable"
DEFAULT_VALUES_FILE = "values.yaml"
CHART_HOME_DIR = "chart"
HELM_HOME_DIR = ".helm"
WORKDIR_PREFIX = "helm-inflator-"

# Alternate spellings accepted for a few keys, mapped to the canonical key.
_KEY_ALIASES = {
    "chartRepoURL": "chartRepoUrl",
    "chartArgs": "extraArgs",
}

_STR_KEYS = (
    "chartName",
    "chartVersion",
    "chartRepoName",
    "chartRepoUrl",
    "chartHome",
    "releaseName",
    "releaseNamespace",
    "values",
    "helmBin",
    "helmHome",
)


def _check_types(doc: dict[str, Any]) -> None:
    """Reject values that would otherwise be silently coerced."""
    for key in _STR_KEYS:
        value = doc.get(key)
        if value is not None and not isinstance(value, str):
            raise MalformedConfigException(
                f"Invalid generator config, '{key}' must be a string: {value!r}"
            )
    extra_args = doc.get("extraArgs")
    if extra_args is not None and (
        not isinstance(extra_args, list)
        or not all(isinstance(arg, str) for arg in extra_args)
    ):
        raise MalformedConfigException(
            f"Invalid generator config, 'extraArgs' must be a list of strings: {extra_args!r}"
        )


@dataclass
class ObjectMeta(DataClassDictMixin):
    """Identity of the generator configuration, opaque to the generator."""

    name: str | None = None
    namespace: str | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None

    class Config(BaseConfig):
        omit_none = True
        forbid_extra_keys = True


@dataclass
class GeneratorConfig(DataClassDictMixin):
    """Options for inflating a single helm chart."""

    chart_name: str | None = field(
        metadata=field_options(alias="chartName"), default=None
    )
    """The name of the chart, required."""

    chart_version: str | None = field(
        metadata=field_options(alias="chartVersion"), default=None
    )
    """Pin the chart to a specific version when pulling."""

    chart_repo_name: str | None = field(
        metadata=field_options(alias="chartRepoName"), default=None
    )
    """Name of a configured helm repository the chart is pulled from."""

    chart_repo_url: str | None = field(
        metadata=field_options(alias="chartRepoUrl"), default=None
    )
    """URL of the chart repository, replaces the repository name when set."""

    chart_home: str | None = field(
        metadata=field_options(alias="chartHome"), default=None
    )
    """Local directory containing charts, or where charts are pulled to."""

    release_name: str | None = field(
        metadata=field_options(alias="releaseName"), default=None
    )
    release_namespace: str | None = field(
        metadata=field_options(alias="releaseNamespace"), default=None
    )

    values: str | None = None
    """Path to the values file used when rendering."""

    extra_args: list[str] | None = field(
        metadata=field_options(alias="extraArgs"), default=None
    )
    """Additional arguments passed verbatim to `helm template`."""

    helm_bin: str | None = field(metadata=field_options(alias="helmBin"), default=None)
    helm_home: str | None = field(
        metadata=field_options(alias="helmHome"), default=None
    )
    """Root of the isolated helm config, cache and data directories."""

    metadata: ObjectMeta | None = None

    api_version: str | None = field(
        metadata=field_options(alias="apiVersion"), default=None
    )
    kind: str | None = None

    @classmethod
    def parse_doc(cls, doc: Any) -> "GeneratorConfig":
        """Parse a GeneratorConfig from a configuration document."""
        if doc is None:
            doc = {}
        if not isinstance(doc, dict):
            raise MalformedConfigException(
                f"Invalid generator config, expected a mapping: {doc!r}"
            )
        doc = dict(doc)
        for alt_key, key in _KEY_ALIASES.items():
            if alt_key not in doc:
                continue
            if key in doc:
                raise MalformedConfigException(
                    f"Invalid generator config, both '{alt_key}' and '{key}' are set"
                )
            doc[key] = doc.pop(alt_key)
        _check_types(doc)
        try:
            return cls.from_dict(doc)
        except (
            MissingField,
            InvalidFieldValue,
            ExtraKeysError,
            ValueError,
            TypeError,
        ) as err:
            raise MalformedConfigException(f"Invalid generator config: {err}") from err

    @classmethod
    def parse_yaml(cls, content: str | bytes) -> "GeneratorConfig":
        """Parse a GeneratorConfig from serialized YAML."""
        try:
            doc = yaml.safe_load(content)
        except yaml.YAMLError as err:
            raise MalformedConfigException(
                f"Unable to parse generator config: {err}"
            ) from err
        return cls.parse_doc(doc)

    def with_defaults(self, root: Path) -> "GeneratorConfig":
        """Return a copy with every unset option defaulted under `root`."""
        chart_home = self.chart_home or str(root / CHART_HOME_DIR)
        return dataclasses.replace(
            self,
            chart_home=chart_home,
            chart_repo_name=self.chart_repo_name or DEFAULT_CHART_REPO_NAME,
            helm_bin=self.helm_bin or HELM_BIN,
            helm_home=self.helm_home or str(root / HELM_HOME_DIR),
            values=self.values
            or str(Path(chart_home) / cast(str, self.chart_name) / DEFAULT_VALUES_FILE),
        )

    @property
    def chart_dir(self) -> str:
        """Local directory of the chart, `<chartHome>/<chartName>`."""
        return str(Path(cast(str, self.chart_home)) / cast(str, self.chart_name))

    @property
    def helm_env(self) -> dict[str, str]:
        """Environment that isolates helm from any system wide configuration."""
        helm_home = cast(str, self.helm_home)
        return {
            "HELM_CONFIG_HOME": helm_home,
            "HELM_CACHE_HOME": f"{helm_home}/.cache",
            "HELM_DATA_HOME": f"{helm_home}/.data",
        }

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True
        forbid_extra_keys = True


class WorkingDirectory:
    """A temporary directory exclusively owned by a single generator run."""

    def __init__(self, path: Path) -> None:
        """Initialize WorkingDirectory."""
        self._path = path

    @classmethod
    def create(cls) -> "WorkingDirectory":
        """Allocate a new uniquely named temporary directory."""
        path = Path(tempfile.mkdtemp(prefix=WORKDIR_PREFIX))
        _LOGGER.debug("Created working directory %s", path)
        return cls(path)

    @property
    def path(self) -> Path:
        """Return the path of the directory."""
        return self._path

    def cleanup(self) -> None:
        """Recursively remove the directory, it may be called more than once."""
        _LOGGER.debug("Removing working directory %s", self._path)
        shutil.rmtree(self._path, ignore_errors=True)

    def __enter__(self) -> Path:
        return self._path

    def __exit__(self, *args: Any) -> None:
        self.cleanup()


def resolve(
    raw: str | bytes | dict[str, Any],
) -> tuple[GeneratorConfig, WorkingDirectory]:
    """Parse the raw configuration and apply defaults.

    The chart name is checked before the working directory is created, so an
    invalid configuration does not touch the filesystem.
    """
    if isinstance(raw, (str, bytes)):
        config = GeneratorConfig.parse_yaml(raw)
    else:
        config = GeneratorConfig.parse_doc(raw)
    if not config.chart_name:
        raise MissingChartNameException("chartName cannot be empty")
    workdir = WorkingDirectory.create()
    return config.with_defaults(workdir.path), workdir
