"""
Configuration layer for faqflow.

This module defines the configuration contracts that control
layout geometry, structural edit policy and snapshot persistence.

Configuration in faqflow is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
"""

from faqflow.config.settings import (
    DeletePolicy,
    LayoutConfig,
    MutationConfig,
    PersistenceConfig,
    FaqflowConfig,
)

__all__ = [
    "DeletePolicy",
    "LayoutConfig",
    "MutationConfig",
    "PersistenceConfig",
    "FaqflowConfig",
]
