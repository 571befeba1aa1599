"""
Detection output decoding.
"""

from .decoder import decode

__all__ = ["decode"]
