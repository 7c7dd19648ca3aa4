# app/api/__init__.py
from fastapi import FastAPI
from app.api.routers import carts, comments, dashboard, health, orders, products, users


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Marketplace Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(comments.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(dashboard.router)

    return app
