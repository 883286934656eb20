"""
sessionguard.auth

Authentication/authorization package.

Responsibilities:
- Session credential encoding and resolution into a `Principal`.
- Route preware predicates (role scope, admin groups, root exclusion).
- FastAPI auth dependencies.
"""

# Package marker.
