"""
In-memory catalog of cloud-native projects with ranked keyword/category search.
"""

__version__ = "0.1.0"
