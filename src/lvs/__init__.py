"""
lvs - local dependency vulnerability scanner for npm and PyPI projects
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
