"""Simulated multi-step workflows for save operations."""

from .simulator import StepCallback, WorkflowRegistry, WorkflowSimulator
from .templates import steps_for

__all__ = [
    "StepCallback",
    "WorkflowRegistry",
    "WorkflowSimulator",
    "steps_for",
]
