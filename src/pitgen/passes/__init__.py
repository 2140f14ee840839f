"""
Generation passes.

Base generators carve the initial layout, modifiers reshape it and
post-process passes validate, repair connectivity or analyze the result.
"""
from .base import GenerationPass, PassRole

__all__ = ["GenerationPass", "PassRole"]
