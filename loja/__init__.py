"""Loja - product catalog service with reseller pricing feed."""

__version__ = "0.1.0"
