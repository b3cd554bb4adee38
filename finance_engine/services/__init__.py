"""External collaborator services."""
