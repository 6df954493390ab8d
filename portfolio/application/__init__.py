"""Application layer: workflow engine services and use cases."""
