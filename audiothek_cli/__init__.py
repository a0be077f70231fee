"""
Audiothek Quickplay: play the latest episode of an ARD Audiothek show from the
terminal.
"""

__version__ = "0.3.0"
