"""Major news paired with matching memes."""

__version__ = "0.1.0"
