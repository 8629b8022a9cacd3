"""
Dealflow Kernel

Shared foundation for the deal-tracking metrics engines:
- Structured JSON logging
- Typed exceptions with machine-readable codes
- Injectable clock
- Immutable record types for deals, proformas, tasks and project timelines
"""

__version__ = "0.1.0"
