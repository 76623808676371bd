"""vitedeploy -- build a React component into a Vite site and publish it.

Accepts a component's source, scaffolds a throwaway Vite + React project
around it with Tailwind CSS, path aliases and shadcn/ui, runs the production
build and deploys the bundle to Surge.
"""

__version__ = "0.1.0"

from vitedeploy.config import Config
from vitedeploy.errors import (
    BuildVerificationError,
    ComponentLibraryError,
    ComponentTransformError,
    PipelineError,
    StagingError,
    ToolError,
    ToolTimeoutError,
    VitedeployError,
)

__all__ = [
    "__version__",
    "Config",
    "VitedeployError",
    "StagingError",
    "ToolError",
    "ToolTimeoutError",
    "ComponentLibraryError",
    "ComponentTransformError",
    "BuildVerificationError",
    "PipelineError",
]
