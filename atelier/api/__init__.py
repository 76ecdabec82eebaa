# atelier/api/__init__.py
from fastapi import FastAPI

from atelier.api.routers import carts, health, orders, payments, products, users


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(title="Atelier", version="1.0.0", lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(payments.router)

    return app
