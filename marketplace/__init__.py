"""Marketplace REST services: accounts/authentication and product listings."""

__version__ = "0.1.0"
