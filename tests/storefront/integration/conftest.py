import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from storefront.api import cart_router, order_router, storage_fault_handler, user_router
from storefront.persistence.errors import StorageFault


@pytest.fixture()
def client(_storefront_domain):
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with _storefront_domain.domain_context():
            return await call_next(request)

    app.include_router(order_router)
    app.include_router(user_router)
    app.include_router(cart_router)
    app.add_exception_handler(StorageFault, storage_fault_handler)
    return TestClient(app, raise_server_exceptions=False)
