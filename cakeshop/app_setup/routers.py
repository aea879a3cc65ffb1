"""
Registre central des routers (API v1, admin, health).
"""
from fastapi import FastAPI
from cakeshop.auth.views import router as auth_router
from cakeshop.catalog.views import router as catalog_router
from cakeshop.users.views import router as users_router
from cakeshop.cart.views import router as cart_router
from cakeshop.orders.views import router as orders_router
from cakeshop.payments.views import router as payments_router
from cakeshop.admin.views import router as admin_router
from cakeshop.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(auth_router)
    app.include_router(catalog_router)
    app.include_router(users_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    # Admin
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
