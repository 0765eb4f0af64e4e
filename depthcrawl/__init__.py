"""
depthcrawl

A depth-bounded concurrent crawler over a pluggable page fetcher.
"""

__version__ = "1.0.0"
__description__ = "Depth-bounded concurrent link-graph crawler"
