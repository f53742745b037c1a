"""Complementarity and co-evolution analysis of gene function prediction methods."""

__version__ = "0.1.0"
