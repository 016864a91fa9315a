"""Client for reserving marketplace products and tracking their pickup lifecycle."""

__version__ = "0.1.0"
