"""Kernel services shared by every module."""

from tooling_kernel.services.workflow_executor import (
    TransitionResult,
    WorkflowExecutor,
)

__all__ = ["TransitionResult", "WorkflowExecutor"]
