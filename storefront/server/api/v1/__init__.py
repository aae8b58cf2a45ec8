"""
Version 1 API routers.

Each module exposes a ``router`` that ``storefront.server.main`` mounts
under its resource prefix.
"""
