"""
Tooling Kernel

Shared foundations for the tooling procurement core:
- Structured JSON logging with action-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock, actor roles and workflow state-machine types
- Table-driven workflow executor with transition traces
- Yearly document numbering (PR-, QUOT-, HAND-, REQ-, PROJ-)
- SQLAlchemy declarative base and engine/session management
"""

__version__ = "0.1.0"
