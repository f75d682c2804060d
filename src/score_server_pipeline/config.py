"""Pipeline configuration - fixed build, packaging and publish settings."""

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Build & Package
# =============================================================================


class BuildTarget(BaseModel):
    """Cross-compilation settings passed to the golang module."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    os: str = "linux"
    arch: str = "amd64"
    static: bool = True
    args: list[str] = Field(default_factory=list, description="Extra build flags")


class ImageSpec(BaseModel):
    """Container image layout for the score-server binary."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    os: str = "linux"
    arch: str = "amd64"
    entrypoint: list[str] = Field(default_factory=lambda: ["./score-server"])
    port: int = Field(default=5800, gt=0, lt=65536)


# =============================================================================
# Publish
# =============================================================================


class PublishPolicy(BaseModel):
    """Where and how images are published when a token is supplied."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    registry_type: str = "harbor"
    secret_backend_type: str = "vault"
    use_sandbox: bool = False
    image_name: str = "playground/score-server"

    # Primary-branch promotion: off unless explicitly enabled
    promote_primary_branch: bool = False
    primary_branch: str = "main"
    primary_image_name: str = "fastly/score-server"


class PublishPlan(BaseModel):
    """
    Resolved image name and tag for a single publication.

    ``signed`` records whether the image lands in the primary namespace. The
    registry signs images pushed there; nothing extra is sent with publish.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    tag: str
    signed: bool = False

    @classmethod
    def from_metadata(
        cls,
        policy: PublishPolicy,
        repo_name: str,
        sha: str,
        branch: str | None = None,
    ) -> "PublishPlan":
        """
        Build the plan for an image from git metadata.

        The tag is always ``<repo_name>-<sha>``. When primary-branch promotion
        is enabled and ``branch`` is the primary branch, the image moves to the
        signed namespace.
        """
        tag = f"{repo_name}-{sha}"
        if (
            policy.promote_primary_branch
            and branch is not None
            and branch == policy.primary_branch
        ):
            return cls(name=policy.primary_image_name, tag=tag, signed=True)
        return cls(name=policy.image_name, tag=tag)


# =============================================================================
# Pipeline
# =============================================================================


class PipelineConfig(BaseModel):
    """Top-level configuration handed to every stage through the context."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    build: BuildTarget = Field(default_factory=BuildTarget)
    image: ImageSpec = Field(default_factory=ImageSpec)
    publish: PublishPolicy = Field(default_factory=PublishPolicy)

    ignore: list[str] = Field(
        default_factory=lambda: [".forge"],
        description="Paths excluded from the source snapshot",
    )
    test_args: list[str] = Field(default_factory=lambda: ["-race"])

    # Smoke test client
    smoke_image: str = "curlimages/curl:latest"
    service_hostname: str = "score-server"


DEFAULT_CONFIG = PipelineConfig()
