import pytest
from fastapi import FastAPI, Request
from protean.integrations.fastapi import register_exception_handlers

from tailoring.domain import tailoring


@pytest.fixture()
def app():
    """Bare FastAPI app wired like ``src/app.py``, without any routers."""
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with tailoring.domain_context():
            response = await call_next(request)
        return response

    register_exception_handlers(app)
    return app
