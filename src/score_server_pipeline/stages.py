"""
Pipeline stages for the score-server Go project.

Each stage is a plain async function taking the engine context first:

1. verify            - go vet, diagnostics fail the run
2. build_image       - verify, static linux/amd64 build, package into an image
3. publish_image     - tag with git metadata and publish (token required)
4. build_and_package - build_image + publish_image, returns the container
5. run_as_service    - container with the server port exposed, as a service

Supplementary checks (lint, unit_test, check_all) and runtime probes
(version, smoke_test) are built on the same stages.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import dagger

from score_server_pipeline.config import PublishPlan
from score_server_pipeline.context import Image, PipelineContext
from score_server_pipeline.exceptions import MetadataError, VerificationError
from score_server_pipeline.report import (
    format_json_report,
    format_report,
    timed_check,
)

logger = logging.getLogger(__name__)

METADATA_ERRORS = {
    "commit": "Error retrieving commit",
    "repo_name": "Error retrieving repository name",
    "branch": "Error retrieving branch",
}


# =============================================================================
# Verification
# =============================================================================


async def verify(ctx: PipelineContext, src: dagger.Directory) -> None:
    """Run go vet; any diagnostic output fails the stage with that text."""
    logger.info("Running go vet")
    diagnostics = await ctx.go(src).vet()
    if diagnostics:
        logger.warning("go vet reported diagnostics")
        raise VerificationError(diagnostics)


async def lint(ctx: PipelineContext, src: dagger.Directory) -> None:
    """Run staticcheck; any output fails the stage with that text."""
    logger.info("Running staticcheck")
    diagnostics = await ctx.go(src).check()
    if diagnostics:
        logger.warning("staticcheck reported diagnostics")
        raise VerificationError(diagnostics, stage="lint")


async def unit_test(
    ctx: PipelineContext, src: dagger.Directory, args: list[str] | None = None
) -> str:
    """Run go test and return its output."""
    test_args = list(ctx.config.test_args) if args is None else list(args)
    logger.info("Running go test %s", " ".join(test_args))
    return await ctx.go(src).test(args=test_args)


async def check_all(
    ctx: PipelineContext, src: dagger.Directory, json_output: bool = False
) -> str:
    """Run vet, staticcheck and go test concurrently and report on all three."""
    results = await asyncio.gather(
        timed_check("Verify", "go vet", verify(ctx, src)),
        timed_check("Lint", "staticcheck", lint(ctx, src)),
        timed_check("Test", "go test", unit_test(ctx, src)),
    )
    if json_output:
        return format_json_report(list(results))
    return format_report(list(results))


# =============================================================================
# Build & Package
# =============================================================================


async def build_image(ctx: PipelineContext, src: dagger.Directory) -> Image:
    """Verify the source, compile a static binary and package it into an image."""
    await verify(ctx, src)

    target = ctx.config.build
    logger.info("Building score-server for %s/%s", target.os, target.arch)
    binary = ctx.go(src).build(
        os=target.os,
        arch=target.arch,
        static=target.static,
        args=list(target.args),
    )

    return ctx.image_builder().package(binary, list(ctx.config.image.entrypoint))


# =============================================================================
# Publish
# =============================================================================


async def _read_git(field: str, fetch: Callable[[], Awaitable[str]]) -> str:
    """Read one piece of git metadata, failing on errors or empty values."""
    try:
        value = await fetch()
    except Exception as e:
        logger.error("%s: %s", METADATA_ERRORS[field], e)
        raise MetadataError(METADATA_ERRORS[field], field=field) from e
    if not value:
        raise MetadataError(METADATA_ERRORS[field], field=field)
    return value


async def plan_publication(ctx: PipelineContext, src: dagger.Directory) -> PublishPlan:
    """Resolve the published image name and tag from the source's git metadata."""
    git = ctx.git(src)
    policy = ctx.config.publish

    sha = await _read_git(
        "commit", lambda: git.commit(short=True, ignore_dirty=True)
    )
    repo_name = await _read_git("repo_name", git.repo_name)

    branch = None
    if policy.promote_primary_branch:
        branch = await _read_git("branch", git.branch)

    return PublishPlan.from_metadata(policy, repo_name, sha, branch)


async def publish_image(
    ctx: PipelineContext,
    src: dagger.Directory,
    image: Image,
    token: dagger.Secret | None = None,
) -> Image:
    """
    Publish the image when a registry token is supplied.

    Without a token the image is returned untouched. With one, the image is
    renamed and tagged from git metadata, then pushed.
    """
    if token is None:
        logger.info("No vault token provided - skipping image publishing")
        return image

    plan = await plan_publication(ctx, src)
    image = image.with_name(plan.name).with_tags([plan.tag])

    policy = ctx.config.publish
    logger.info(
        "Publishing %s:%s to %s (signed=%s)",
        plan.name,
        plan.tag,
        policy.registry_type,
        plan.signed,
    )
    await image.publish(
        registry_type=policy.registry_type,
        secret_backend_type=policy.secret_backend_type,
        token=token,
        use_sandbox=policy.use_sandbox,
    )
    return image


async def build_and_package(
    ctx: PipelineContext,
    src: dagger.Directory,
    token: dagger.Secret | None = None,
) -> dagger.Container:
    """Build the image, publish it if a token is given, return its container."""
    image = await build_image(ctx, src)
    image = await publish_image(ctx, src, image, token)
    return image.container()


# =============================================================================
# Service
# =============================================================================


async def run_as_service(ctx: PipelineContext, src: dagger.Directory) -> dagger.Service:
    """Run the packaged server as a service with its port exposed."""
    ctr = await build_and_package(ctx, src)
    return ctr.with_exposed_port(ctx.config.image.port).as_service()


async def version(ctx: PipelineContext, src: dagger.Directory) -> str:
    """Print the version reported by the packaged binary."""
    ctr = await build_and_package(ctx, src)
    output = await ctr.with_exec(["--version"], use_entrypoint=True).stdout()
    return output.strip()


async def smoke_test(
    ctx: PipelineContext, src: dagger.Directory, player: str = "robert"
) -> str:
    """Record a win for a player against the running server and read back the score."""
    service = await run_as_service(ctx, src)

    host = ctx.config.service_hostname
    url = f"http://{host}:{ctx.config.image.port}/players/{player}"
    curl = ["curl", "--fail", "--silent", "--show-error"]

    logger.info("Smoke testing %s", url)
    score = await (
        ctx.container()
        .from_(ctx.config.smoke_image)
        .with_service_binding(host, service)
        .with_exec([*curl, "-X", "POST", url])
        .with_exec([*curl, url])
        .stdout()
    )
    return score.strip()
