"""
vocab_trainer - spaced repetition and passive audio learning for vocabulary.

Packages:
- sm2: SM-2 review scheduler (pure functions)
- session: playback session engine
- stores: vocabulary stores and the session log
- analytics: progress summaries and review statistics
"""

__version__ = "0.1.0"
