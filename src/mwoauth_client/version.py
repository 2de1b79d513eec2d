"""Version information for the MediaWiki OAuth client"""

__version__ = "0.1.0"
