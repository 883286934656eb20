"""
sessionguard.services

Service layer.

Responsibilities:
- Multi-repository flows that own their transaction (user provisioning).
"""

# Package marker.
