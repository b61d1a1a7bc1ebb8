"""helm-inflator generate action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import sys
from typing import Any, cast

import aiofiles

from helm_inflator.generator import HelmChartInflationGenerator

_LOGGER = logging.getLogger(__name__)


class GenerateAction:
    """helm-inflator generate action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "generate",
                help="Inflate a helm chart described by a generator config file",
                description="""Reads a generator config, pulls the chart unless it
                    is already present in the chart home and renders it with
                    helm template. The rendered manifests are written as a
                    multi-document YAML stream.""",
            ),
        )
        args.add_argument(
            "config_file",
            type=str,
            help="Path to the generator config file, or - to read from stdin",
        )
        args.add_argument(
            "--output-file",
            type=str,
            default="/dev/stdout",
            help="Output file for the rendered manifests",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        config_file: str,
        output_file: str,
        **kwargs: Any,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        if config_file == "-":
            content = sys.stdin.buffer.read()
        else:
            async with aiofiles.open(config_file, mode="rb") as config_fd:
                content = await config_fd.read()

        generator = HelmChartInflationGenerator()
        generator.config(content)
        out = await generator.generate()

        async with aiofiles.open(output_file, mode="wb") as output_fd:
            await output_fd.write(out)
