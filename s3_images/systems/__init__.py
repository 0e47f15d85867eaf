"""
Object storage systems.
"""

from .base import ObjectStorageSystem

__all__ = ['ObjectStorageSystem']
