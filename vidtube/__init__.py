"""vidtube - social video platform backend core"""

__version__ = "0.0.1"
