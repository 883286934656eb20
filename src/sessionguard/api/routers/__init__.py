"""
sessionguard.api.routers

Routers mounted by `sessionguard.api.app.create_app`.
"""

# Package marker.
