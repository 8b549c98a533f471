"""AI package exports."""

from .targeting import DEFAULT_DIFFICULTY, Difficulty, TargetingAI, TargetingMode

__all__ = ["DEFAULT_DIFFICULTY", "Difficulty", "TargetingAI", "TargetingMode"]
