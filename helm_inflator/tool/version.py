"""helm-inflator version action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from typing import Any, cast

from helm_inflator.config import HELM_BIN, resolve
from helm_inflator.helm import Helm


class VersionAction:
    """helm-inflator version action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "version",
                help="Check that the helm binary is a supported version",
            ),
        )
        args.add_argument(
            "--helm-bin",
            type=str,
            default=HELM_BIN,
            help="Name or path of the helm binary",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        helm_bin: str,
        **kwargs: Any,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # The chart name is only needed to satisfy config validation.
        config, workdir = resolve({"chartName": "version", "helmBin": helm_bin})
        with workdir:
            version = await Helm(config).check_version()
        print(f"v{version}")
