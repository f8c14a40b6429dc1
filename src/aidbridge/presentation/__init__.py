"""HTTP presentation layer (FastAPI routers and schemas)."""
