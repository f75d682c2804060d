"""Engine context and the collaborator interfaces the stages rely on."""

from collections.abc import Awaitable
from typing import Any, Protocol

import dagger

from score_server_pipeline.config import DEFAULT_CONFIG, PipelineConfig

# =========================================================================
# Collaborators (installed Dagger modules)
# =========================================================================


class GoProject(Protocol):
    """Go toolchain wrapper returned by ``dag.golang(src)``."""

    def vet(self) -> Awaitable[str]: ...

    def check(self) -> Awaitable[str]: ...

    def test(self, *, args: list[str]) -> Awaitable[str]: ...

    def build(
        self, *, os: str, arch: str, static: bool, args: list[str]
    ) -> dagger.File: ...


class Image(Protocol):
    """Image handle produced by the docker module."""

    def with_name(self, name: str) -> "Image": ...

    def with_tags(self, tags: list[str]) -> "Image": ...

    def publish(
        self,
        *,
        registry_type: str,
        secret_backend_type: str,
        token: dagger.Secret,
        use_sandbox: bool,
    ) -> Awaitable[Any]: ...

    def container(self) -> dagger.Container: ...


class ImageBuilder(Protocol):
    """Docker module configured for a target platform."""

    def package(self, bin: dagger.File, entrypoint: list[str]) -> Image: ...


class GitRepo(Protocol):
    """Git metadata reader returned by ``dag.local_git(src)``."""

    def commit(self, *, short: bool, ignore_dirty: bool) -> Awaitable[str]: ...

    def repo_name(self) -> Awaitable[str]: ...

    def branch(self) -> Awaitable[str]: ...


# =========================================================================
# Context
# =========================================================================


class PipelineContext:
    """
    Everything a stage needs from the outside world.

    Wraps the engine client so stages never reach for ``dagger.dag``
    themselves; tests pass a mock client instead.
    """

    def __init__(self, client: Any, config: PipelineConfig = DEFAULT_CONFIG) -> None:
        self.client = client
        self.config = config

    @classmethod
    def from_engine(cls, config: PipelineConfig = DEFAULT_CONFIG) -> "PipelineContext":
        """Context bound to the running Dagger engine."""
        return cls(dagger.dag, config)

    def go(self, src: dagger.Directory) -> GoProject:
        return self.client.golang(src)

    def image_builder(self) -> ImageBuilder:
        image = self.config.image
        return self.client.docker(os=image.os, arch=image.arch)

    def git(self, src: dagger.Directory) -> GitRepo:
        return self.client.local_git(src)

    def container(self) -> dagger.Container:
        return self.client.container()
