"""Dagger entry point for the score-server pipeline."""

from __future__ import annotations

from typing import Annotated

import dagger
from dagger import DefaultPath, Doc, Ignore, function, object_type

from score_server_pipeline.config import DEFAULT_CONFIG
from score_server_pipeline.context import PipelineContext
from score_server_pipeline.log import configure_logging
from score_server_pipeline.registry import run_stage

Source = Annotated[
    dagger.Directory,
    DefaultPath("/"),
    Ignore(DEFAULT_CONFIG.ignore),
    Doc("The score-server source tree"),
]


@object_type
class ScoreServer:
    """Test, package and run the score-server Go project."""

    def _context(self) -> PipelineContext:
        configure_logging()
        return PipelineContext.from_engine()

    # =========================================================================
    # Checks
    # =========================================================================

    @function
    async def verify(self, src: Source) -> None:
        """Run go vet against the score-server project."""
        await run_stage("verify", self._context(), src=src)

    @function
    async def lint(self, src: Source) -> None:
        """Run staticcheck against the score-server project."""
        await run_stage("lint", self._context(), src=src)

    @function
    async def unit_test(
        self,
        src: Source,
        args: Annotated[list[str] | None, Doc("Arguments for go test")] = None,
    ) -> str:
        """Run go test (with -race by default)."""
        return await run_stage("unit-test", self._context(), src=src, args=args)

    @function
    async def check_all(self, src: Source, json_output: bool = False) -> str:
        """Run vet, staticcheck and go test and report the results.

        Parameters
        ----------
        src:
            The score-server source tree.
        json_output:
            If True, return JSON-formatted output for machine parsing.
        """
        return await run_stage(
            "check-all", self._context(), src=src, json_output=json_output
        )

    # =========================================================================
    # Build & Run
    # =========================================================================

    @function
    async def build_and_package(
        self,
        src: Source,
        token: Annotated[
            dagger.Secret | None, Doc("Vault token; the image is published when set")
        ] = None,
    ) -> dagger.Container:
        """Build and optionally publish a Docker image for the score-server package."""
        return await run_stage(
            "build-and-package", self._context(), src=src, token=token
        )

    @function
    async def run_as_service(self, src: Source) -> dagger.Service:
        """Run the score-server project as a service on port 5800."""
        return await run_stage("run-as-service", self._context(), src=src)

    @function
    async def version(self, src: Source) -> str:
        """Print the version of the packaged score-server binary."""
        return await run_stage("version", self._context(), src=src)

    @function
    async def smoke_test(self, src: Source, player: str = "robert") -> str:
        """Score a player against the running server and return the score."""
        return await run_stage("smoke-test", self._context(), src=src, player=player)
