"""Use-case layer for the update pipeline.

Each module runs one pipeline stage against an adapter and translates
low-level failures into the typed errors in ``restupdate.domain.errors``.
"""
