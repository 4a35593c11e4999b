"""Building blocks for a dynamic DNS update client."""

__version__ = "2.9.0"