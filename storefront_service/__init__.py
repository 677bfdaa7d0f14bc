"""Storefront Service: catalog, guest checkout and order administration over an in-memory store."""

__version__ = "0.1.0"
