"""Plugwise hub toolkit - gateway document translation and network discovery."""

__version__ = "0.1.0"
__author__ = "Plugwise Hub Team"

from . import discovery, gateway

__all__ = [
    "__version__",
    "__author__",
    "discovery",
    "gateway",
]
