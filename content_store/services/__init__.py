"""Container, ordering and batch-update services."""
