"""
Medicine Reconciliation Engine

Cross-references medicine identifiers against public drug data sources and
compiles a single verified profile with per-field confidence.
"""

__version__ = "0.1.0"
