"""
Instant interbank transfer service.
"""

__version__ = "1.0.0"
