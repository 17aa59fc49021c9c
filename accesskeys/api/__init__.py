"""HTTP surface of the access key service (FastAPI routers and dependencies)."""
