"""Client for the seed-account calculator program."""

__version__ = "0.1.0"
