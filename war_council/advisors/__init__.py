"""Council advisors backed by the model."""

from .councilor import CouncilAdvisor, LoopState, ToolLoop

__all__ = ["CouncilAdvisor", "LoopState", "ToolLoop"]
