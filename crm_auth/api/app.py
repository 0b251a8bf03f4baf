import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crm_auth.adapter.services.database import database
from crm_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from crm_auth.app.use_cases.roles import SeedPermissionsUseCase

from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, background=exc.background
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code} {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    error_dict = {"code": "VALIDATION_ERROR", "message": "Invalid request", "details": details}
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.connect(ApplicationConfig.DB_URI)
        if ApplicationConfig.AUTO_CREATE_SCHEMA:
            await database.create_schema()

        async with database.session_factory() as session:
            result = await SeedPermissionsUseCase(SqlAlchemyUnitOfWork(session)).execute()
        if result.is_err():
            logger.error(f"Permission seeding failed: {result.error.message}")

        logger.info(f"CRM auth started ({ApplicationConfig.ENVIRONMENT})")
        yield
        await database.close()

    app = FastAPI(title="CRM Auth API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from crm_auth.api.routes import auth, health_check, invitation, roles, sessions

    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(sessions.router)
    app.include_router(invitation.router)
    app.include_router(roles.router)

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
