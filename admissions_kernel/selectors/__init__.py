"""Read-only query selectors."""

from admissions_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
