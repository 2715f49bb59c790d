from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from academy.api.router import api_router
from academy.core.config import get_settings
from academy.core.errors import register_error_handlers
from academy.core.log_config import configure_logging
from academy.core.security import hash_password
from academy.db.session import get_session_factory
from academy.models.admin import Admin


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if settings.auto_create_admin:
            session_factory = get_session_factory()
            with session_factory() as db:
                existing = db.scalar(select(Admin).where(Admin.login == settings.bootstrap_admin_login))
                if not existing:
                    admin = Admin(
                        login=settings.bootstrap_admin_login,
                        password_hash=hash_password(settings.bootstrap_admin_password),
                        role="admin",
                    )
                    db.add(admin)
                    db.commit()
        yield

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()
