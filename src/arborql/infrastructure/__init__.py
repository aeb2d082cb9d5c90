"""Infrastructure layer — database, SQL generation, traversal execution.

This layer depends on the domain layer and SQLAlchemy. It must never import
from services, commands, or output.
"""
