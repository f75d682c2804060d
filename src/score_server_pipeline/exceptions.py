"""Pipeline exceptions."""


class PipelineError(Exception):
    """Base exception for pipeline stage failures."""

    def __init__(self, message: str, stage: str | None = None) -> None:
        self.message = message
        self.stage = stage
        super().__init__(message)


class VerificationError(PipelineError):
    """A static checker produced diagnostics."""

    def __init__(self, diagnostics: str, stage: str | None = "verify") -> None:
        super().__init__(diagnostics, stage)
        self.diagnostics = diagnostics


class MetadataError(PipelineError):
    """Git metadata could not be read from the source snapshot."""

    def __init__(self, message: str, field: str, stage: str | None = "publish") -> None:
        super().__init__(message, stage)
        self.field = field


class UnknownStageError(PipelineError):
    """No stage is registered under the requested name."""


class StageArgumentError(PipelineError):
    """Arguments do not match a stage's declared parameters."""
