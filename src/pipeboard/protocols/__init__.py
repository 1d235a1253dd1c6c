"""
Protocol exports for presentation callbacks.
"""

__all__ = ["NullUI", "PipelineUI"]

from .ui import NullUI, PipelineUI
