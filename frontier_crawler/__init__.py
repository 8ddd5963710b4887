"""
Frontier Crawler

A concurrent web crawler driven by a shared frontier of pending and visited URLs.
"""

__version__ = "1.0.0"
__description__ = "A concurrent breadth/randomized frontier web crawler"
