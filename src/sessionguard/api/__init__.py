"""
sessionguard.api

HTTP API package.

Responsibilities:
- FastAPI app composition, dependencies and routers.
"""

# Package marker.
