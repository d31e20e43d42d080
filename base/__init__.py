"""
Base infrastructure components for the reseller portal client.
"""

from .logger import Logger

__all__ = [
    'Logger',
]
