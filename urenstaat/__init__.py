"""Urenstaat - monthly time sheets from weekly hour logs"""

__version__ = "0.1.0"
