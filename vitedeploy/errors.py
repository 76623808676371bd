"""Exception hierarchy for the build-and-deploy pipeline."""

from __future__ import annotations


class VitedeployError(Exception):
    """Base class for every error raised by vitedeploy."""


class StagingError(VitedeployError):
    """Raised when the submitted component cannot be decoded or staged."""


class ToolError(VitedeployError):
    """Raised when an external command fails to start or exits non-zero."""

    def __init__(
        self,
        message: str,
        command: str = "",
        exit_code: int | None = None,
        output: str = "",
    ):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(message)


class ToolTimeoutError(ToolError):
    """Raised when an external command exceeds its time limit."""


class ComponentLibraryError(VitedeployError):
    """Raised when the UI component library fails to initialise.

    The public message is fixed; the underlying failure text is kept in
    ``detail`` for logs.
    """

    def __init__(self, message: str, detail: str = ""):
        self.detail = detail
        super().__init__(message)


class ComponentTransformError(VitedeployError):
    """Raised when the component source has no default export to normalise."""


class BuildVerificationError(VitedeployError):
    """Raised when the bundler left no build output behind."""


class PipelineError(VitedeployError):
    """Raised when a pipeline step fails for a reason not covered above."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"{step}: {message}")
