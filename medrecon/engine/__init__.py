"""
Reconciliation stages and the engine that chains them.
"""
from medrecon.engine.pipeline import ReconciliationEngine

__all__ = ["ReconciliationEngine"]
