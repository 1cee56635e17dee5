import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.errors import register_error_handlers
from backend.database import Database
from backend.routes import auth_routes, survey_routes, user_routes

logger = logging.getLogger(__name__)


def mount_frontend(app: FastAPI, build_dir: str) -> None:
    build_path = Path(build_dir).resolve()
    index_file = build_path / 'index.html'
    if not index_file.is_file():
        logger.warning('Frontend build not found at %s; serving API only.', build_path)
        return

    static_dir = build_path / 'static'
    if static_dir.is_dir():
        app.mount('/static', StaticFiles(directory=static_dir), name='static')

    @app.get('/{full_path:path}', include_in_schema=False)
    def serve_frontend(full_path: str):
        requested = (build_path / full_path).resolve()
        if full_path and requested.is_file() and build_path in requested.parents:
            return FileResponse(requested)
        return FileResponse(index_file)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = app.state.database
    try:
        database.open()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')
        raise
    logger.info('Database ready (%s)', database.engine.url.render_as_string(hide_password=True))
    try:
        yield
    finally:
        database.close()


def create_app(database: Database | None = None) -> FastAPI:
    logging.basicConfig(level=config.LOG_LEVEL)
    config.validate_runtime_config()

    app = FastAPI(title='Education Migration Survey API', lifespan=lifespan)
    app.state.database = database or Database(config.DATABASE_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials='*' not in config.CORS_ORIGINS,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_error_handlers(app)

    @app.get(config.API_PREFIX or '/')
    def root():
        return {'status': 'Survey API Running'}

    app.include_router(auth_routes.router, prefix=f'{config.API_PREFIX}/auth')
    app.include_router(user_routes.router, prefix=f'{config.API_PREFIX}/users')
    app.include_router(survey_routes.router, prefix=f'{config.API_PREFIX}/surveys')

    if config.is_production():
        mount_frontend(app, config.FRONTEND_BUILD_DIR)

    return app
