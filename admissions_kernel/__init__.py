"""
Admissions Kernel

Shared infrastructure for the admission lifecycle:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- SQLAlchemy declarative base and engine management
- Pure workflow and clock primitives
- Locked-row sequence allocation
"""

__version__ = "0.1.0"
