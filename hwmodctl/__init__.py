"""Hardware module acquisition toolkit."""

__version__ = "0.1.0"
