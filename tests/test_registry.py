"""Tests for the stage registration table."""

from unittest.mock import MagicMock

import pytest

from score_server_pipeline import stages
from score_server_pipeline.exceptions import StageArgumentError, UnknownStageError
from score_server_pipeline.registry import STAGES, get_stage, run_stage


class TestStageTable:
    """Tests for registered operations."""

    def test_core_operations_registered(self):
        """Test the three pipeline operations and their handlers."""
        assert STAGES["verify"].handler is stages.verify
        assert STAGES["build-and-package"].handler is stages.build_and_package
        assert STAGES["run-as-service"].handler is stages.run_as_service

    def test_every_stage_takes_source(self):
        """Test that each operation declares a required source directory."""
        for spec in STAGES.values():
            src = spec.params[0]
            assert src.name == "src"
            assert src.required is True

    def test_token_is_optional(self):
        """Test that build-and-package declares an optional token."""
        token = {p.name: p for p in STAGES["build-and-package"].params}["token"]

        assert token.required is False
        assert token.default is None

    def test_unknown_stage(self):
        """Test lookup of an unregistered operation."""
        with pytest.raises(UnknownStageError, match="deploy"):
            get_stage("deploy")


class TestRunStage:
    """Tests for dispatch through run_stage."""

    @pytest.mark.asyncio
    async def test_dispatches_verify(self, ctx, src, go):
        """Test that run_stage calls the registered handler."""
        result = await run_stage("verify", ctx, src=src)

        assert result is None
        go.vet.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fills_optional_token(self, ctx, src, image, container):
        """Test that the token defaults to None and nothing is published."""
        result = await run_stage("build-and-package", ctx, src=src)

        assert result is container
        image.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_passes_token(self, ctx, src, token, image):
        """Test that a supplied token reaches the publish stage."""
        await run_stage("build-and-package", ctx, src=src, token=token)

        assert image.publish.await_args.kwargs["token"] is token

    @pytest.mark.asyncio
    async def test_missing_source(self, ctx):
        """Test that a missing required argument is rejected."""
        with pytest.raises(StageArgumentError, match="src"):
            await run_stage("verify", ctx)

    @pytest.mark.asyncio
    async def test_unexpected_argument(self, ctx, src, go):
        """Test that undeclared arguments are rejected before running."""
        with pytest.raises(StageArgumentError, match="token"):
            await run_stage("verify", ctx, src=src, token=MagicMock())

        go.vet.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_type(self, ctx):
        """Test that arguments are checked against the declared kind."""
        with pytest.raises(StageArgumentError, match="src"):
            await run_stage("verify", ctx, src="/tmp/score-server")

    @pytest.mark.asyncio
    async def test_default_applied(self, ctx, src):
        """Test that declared defaults are used for omitted arguments."""
        report = await run_stage("check-all", ctx, src=src)

        assert report.startswith("═")
