"""Morlock - line-level timelapse of a file's history.

Reconstructs, for a single tracked text file, the ordered sequence of
present and deleted line runs that explains both its current content and
every line ever removed from it.
"""

__version__ = "0.1.0"
