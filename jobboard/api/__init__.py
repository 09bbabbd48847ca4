"""
API module - FastAPI routers, route handlers and service providers.

Usage:
    from jobboard.api.routes import api_router
    app.include_router(api_router, prefix="/api")
"""
