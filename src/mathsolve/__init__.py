"""Math practice service: problems, answer checking, scoring and ranks."""

__version__ = "0.1.0"
