"""HTTP API: FastAPI application, dependency wiring and routers."""
