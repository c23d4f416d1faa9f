# marketplace/api/__init__.py
from fastapi import FastAPI

from marketplace.api.errors import register_exception_handlers
from marketplace.api.routers import (
    addresses,
    admin,
    carts,
    coupons,
    health,
    orders,
    products,
    reviews,
    users,
    vendors,
    wishlist,
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Rental Marketplace",
        version="1.0.0",
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(vendors.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(coupons.router)
    app.include_router(addresses.router)
    app.include_router(reviews.router)
    app.include_router(wishlist.router)
    app.include_router(admin.router)

    return app
