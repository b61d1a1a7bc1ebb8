"""Exceptions related to helm-inflator."""

__all__ = [
    "InflatorException",
    "InputException",
    "MalformedConfigException",
    "MissingChartNameException",
    "CommandException",
    "HelmException",
    "HelmFetchException",
    "HelmRenderException",
    "HelmVersionException",
]


class InflatorException(Exception):
    """Generic base exception used for this library."""


class InputException(InflatorException):
    """Raised when the generator configuration is not formatted as expected."""


class MalformedConfigException(InputException):
    """Raised when the configuration can't be parsed into a GeneratorConfig."""


class MissingChartNameException(InputException):
    """Raised when the configuration does not name a chart."""


class CommandException(InflatorException):
    """Raised when there is a failure running a subcommand."""

    def __init__(
        self, message: str, cmd: str | None = None, stderr: str | None = None
    ) -> None:
        super().__init__(message)
        self.cmd = cmd
        self.stderr = stderr


class HelmException(CommandException):
    """Raised when there is a failure running a helm command."""


class HelmFetchException(HelmException):
    """Raised when `helm pull` fails to fetch the chart."""


class HelmRenderException(HelmException):
    """Raised when `helm template` fails to render the chart."""


class HelmVersionException(InflatorException):
    """Raised when the helm binary is not a supported version."""

    def __init__(self, message: str, version: str | None = None) -> None:
        super().__init__(message)
        self.version = version
