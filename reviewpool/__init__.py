"""Review Pool: pull request reviewer assignment service."""

__version__ = "0.1.0"
