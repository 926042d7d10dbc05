# flowgate/__init__.py

"""
Analysis-engine glue for the FlowGate flow-cytometry portal.

This package centralizes:
- config (server defaults, polling interval, credential keys)
- REST clients for GenePattern and Galaxy
- job submission and status polling services.
"""

__all__ = ["config"]
