"""
Roamlist - ranked travel collections and tiered photo sharing.
"""

__version__ = "0.4.0"
