"""HTTP boundary layer for the content store."""
