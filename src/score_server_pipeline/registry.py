"""Stage registration table - maps operation names to handlers and parameters."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import dagger

from score_server_pipeline import stages
from score_server_pipeline.context import PipelineContext
from score_server_pipeline.exceptions import StageArgumentError, UnknownStageError

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class Param:
    """A declared stage parameter."""

    name: str
    kind: type | tuple[type, ...]
    required: bool = True
    default: Any = None


@dataclass(frozen=True)
class StageSpec:
    """A registered pipeline operation."""

    name: str
    handler: Callable[..., Awaitable[Any]]
    description: str
    params: tuple[Param, ...] = field(default_factory=tuple)

    def bind(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Check arguments against the declared parameters and fill defaults."""
        declared = {p.name for p in self.params}
        unexpected = sorted(set(kwargs) - declared)
        if unexpected:
            raise StageArgumentError(
                f"Unexpected argument(s) for {self.name}: {', '.join(unexpected)}",
                stage=self.name,
            )

        bound: dict[str, Any] = {}
        for param in self.params:
            value = kwargs.get(param.name, _MISSING)
            if value is _MISSING:
                if param.required:
                    raise StageArgumentError(
                        f"Missing required argument for {self.name}: {param.name}",
                        stage=self.name,
                    )
                value = param.default
            if value is not None and not isinstance(value, param.kind):
                raise StageArgumentError(
                    f"Argument {param.name} for {self.name} has type "
                    f"{type(value).__name__}",
                    stage=self.name,
                )
            bound[param.name] = value
        return bound


SOURCE = Param("src", dagger.Directory)
TOKEN = Param("token", dagger.Secret, required=False)

STAGES: dict[str, StageSpec] = {
    spec.name: spec
    for spec in (
        StageSpec(
            name="verify",
            handler=stages.verify,
            description="Run go vet against the score-server source",
            params=(SOURCE,),
        ),
        StageSpec(
            name="build-and-package",
            handler=stages.build_and_package,
            description="Build and optionally publish the score-server image",
            params=(SOURCE, TOKEN),
        ),
        StageSpec(
            name="run-as-service",
            handler=stages.run_as_service,
            description="Run the score-server image as a service",
            params=(SOURCE,),
        ),
        StageSpec(
            name="lint",
            handler=stages.lint,
            description="Run staticcheck against the score-server source",
            params=(SOURCE,),
        ),
        StageSpec(
            name="unit-test",
            handler=stages.unit_test,
            description="Run go test",
            params=(SOURCE, Param("args", list, required=False)),
        ),
        StageSpec(
            name="check-all",
            handler=stages.check_all,
            description="Run vet, staticcheck and go test and report the results",
            params=(SOURCE, Param("json_output", bool, required=False, default=False)),
        ),
        StageSpec(
            name="version",
            handler=stages.version,
            description="Print the version of the packaged binary",
            params=(SOURCE,),
        ),
        StageSpec(
            name="smoke-test",
            handler=stages.smoke_test,
            description="Score a player against the running service",
            params=(SOURCE, Param("player", str, required=False, default="robert")),
        ),
    )
}


def get_stage(name: str) -> StageSpec:
    """Look up a registered stage by operation name."""
    try:
        return STAGES[name]
    except KeyError:
        raise UnknownStageError(f"Unknown pipeline operation: {name}") from None


async def run_stage(name: str, ctx: PipelineContext, **kwargs: Any) -> Any:
    """Validate arguments and run a registered stage."""
    spec = get_stage(name)
    bound = spec.bind(kwargs)
    logger.info("Running %s", spec.name)
    return await spec.handler(ctx, **bound)
