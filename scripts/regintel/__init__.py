"""
Regulatory intelligence service for medical device compliance data.
"""

__version__ = "1.0.0"
