"""Domain layer: hierarchy binding, errors, tree materialization.

Pure Python apart from SQLAlchemy table metadata. No database access.
"""
