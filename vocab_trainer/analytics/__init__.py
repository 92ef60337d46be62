"""
Analytics package exports.
"""

from vocab_trainer.analytics.service import build_learning_stats, build_progress_summary
from vocab_trainer.analytics.types import LearningStats, ProgressSummary

__all__ = [
    "build_learning_stats",
    "build_progress_summary",
    "LearningStats",
    "ProgressSummary",
]
