"""Application layer — use cases and the reply agent."""
