"""Portfolio workflow automation service."""
