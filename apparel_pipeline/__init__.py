"""
Apparel detection, matching and color-transfer pipeline.
"""

__version__ = "0.1.0"
