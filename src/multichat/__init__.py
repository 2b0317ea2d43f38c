"""multichat - fan one prompt out to several AI chat providers."""

__version__ = "0.1.0"
