"""Customer status services for a travel-certificate voice agent."""

__version__ = "1.0.0"
