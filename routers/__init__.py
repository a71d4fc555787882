"""API routers mounted by server.py."""
