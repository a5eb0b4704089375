"""
Visual similarity matching and ranking for service media.
"""
__version__ = "0.1.0"
