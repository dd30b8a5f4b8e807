"""
fetch-release - install prebuilt stake-o-matic binaries from GitHub releases.
"""

__version__ = "0.1.0"
