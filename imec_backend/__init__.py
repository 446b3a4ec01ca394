"""
IMEC Backend
Contact form backend for the IMEC school website.
"""

__version__ = "1.0.0"
