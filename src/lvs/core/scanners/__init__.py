"""Ecosystem-specific dependency scanners"""

from .base import EcosystemScanner
from .npm_scanner import NpmScanner
from .python_scanner import PythonScanner

__all__ = ["EcosystemScanner", "NpmScanner", "PythonScanner"]
