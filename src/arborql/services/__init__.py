"""Service layer: traversals returning ServiceResult for the CLI."""
