"""
Pytest configuration for pipeline tests.

The Dagger engine is replaced by a MagicMock client whose installed-module
entry points (golang, docker, local_git) return mocks with async methods.
"""

from unittest.mock import AsyncMock, MagicMock

import dagger
import pytest

from score_server_pipeline.context import PipelineContext


@pytest.fixture
def src() -> MagicMock:
    """Source directory snapshot."""
    return MagicMock(spec=dagger.Directory, name="src")


@pytest.fixture
def token() -> MagicMock:
    """Vault token secret."""
    return MagicMock(spec=dagger.Secret, name="token")


@pytest.fixture
def go() -> MagicMock:
    """Go project returned by dag.golang(src), passing every check."""
    go = MagicMock(name="go")
    go.vet = AsyncMock(return_value="")
    go.check = AsyncMock(return_value="")
    go.test = AsyncMock(return_value="ok  \tscore-server/pkg/score\t0.012s")
    return go


@pytest.fixture
def container() -> MagicMock:
    """Container returned by image.container()."""
    container = MagicMock(name="container")
    container.with_exec.return_value.stdout = AsyncMock(
        return_value="version: 1.2.3-tech-summit-special\n"
    )
    return container


@pytest.fixture
def image(container: MagicMock) -> MagicMock:
    """Packaged image; naming calls return the same handle."""
    image = MagicMock(name="image")
    image.with_name.return_value = image
    image.with_tags.return_value = image
    image.publish = AsyncMock(return_value="published")
    image.container.return_value = container
    return image


@pytest.fixture
def git() -> MagicMock:
    """Git metadata reader returned by dag.local_git(src)."""
    git = MagicMock(name="git")
    git.commit = AsyncMock(return_value="abc1234")
    git.repo_name = AsyncMock(return_value="score-server")
    git.branch = AsyncMock(return_value="feature/leaderboard")
    return git


@pytest.fixture
def client(go: MagicMock, image: MagicMock, git: MagicMock) -> MagicMock:
    """Stand-in for dagger.dag."""
    client = MagicMock(name="dag")
    client.golang.return_value = go
    client.docker.return_value.package.return_value = image
    client.local_git.return_value = git
    return client


@pytest.fixture
def ctx(client: MagicMock) -> PipelineContext:
    """Pipeline context with the default configuration."""
    return PipelineContext(client)
