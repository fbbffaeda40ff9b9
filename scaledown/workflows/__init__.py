"""Workflows for Event Hubs scale-down."""

from .scale_down import ScaleDownWorkflow

__all__ = [
    "ScaleDownWorkflow",
]
