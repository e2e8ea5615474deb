"""
WorkTimer - per-employee work-time tracking.
"""

__version__ = "0.1.0"
