"""
Storefront Server Package.

This package contains the web server for the storefront: the FastAPI
application, its routers, configuration, middleware and service layer.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Settings and API constants.
    exception_handlers: Application-wide exception handlers.
    middleware: Request tracing middleware.
    services: Dependencies, security, catalog read models and the order workflow.
"""
