"""vitedeploy builder module.

Runs the external build tools and manages the private directories they run in.

Key classes:
    ToolRunner        - external command execution with streaming output
    WorkspaceManager  - per-request working directory lifecycle
"""

from .runner import ToolResult, ToolRunner
from .workspace import Workspace, WorkspaceManager

__all__ = [
    # Tool execution
    "ToolRunner",
    "ToolResult",
    # Workspaces
    "WorkspaceManager",
    "Workspace",
]
