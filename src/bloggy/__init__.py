"""Bloggy: markdown blogging API."""

__version__ = "0.1.0"
