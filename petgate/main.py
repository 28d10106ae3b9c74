import structlog
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

from .config import Settings, get_settings
from .logging_config import configure_logging
from .contract import load_contract
from .auth.authenticators import AuthenticatorRegistry, build_default_registry
from .auth.exceptions import ConfigurationError
from .contract.models import ContractModel
from .validation.middleware import RequestValidatorMiddleware
from .middleware import AccessLogMiddleware, ErrorResponderMiddleware
from .api.dispatcher import register_handlers
from .server import PetServer
from .store import PetStore

logger = structlog.get_logger("server")


def _check_session_cookie(contract: ContractModel, settings: Settings) -> None:
    """The contract's cookieAuth cookie must be the one the server issues."""
    scheme = contract.security_schemes.get("cookieAuth")
    if scheme is not None and scheme.parameter_name != settings.SESSION_COOKIE_NAME:
        raise ConfigurationError(
            f"cookieAuth expects cookie {scheme.parameter_name!r} "
            f"but SESSION_COOKIE_NAME is {settings.SESSION_COOKIE_NAME!r}"
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("server_started", app=app.title, routes=len(app.state.contract.routes))
    
    yield
    
    # Requests still in flight after the drain timeout are abandoned
    logger.info("server_stopped", app=app.title, pets=len(app.state.store))


def create_app(
    settings: Settings | None = None,
    store: PetStore | None = None,
    authenticators: AuthenticatorRegistry | None = None,
) -> FastAPI:
    """Build the application.
    
    The contract is loaded and checked here, so a broken contract or an
    incomplete authenticator registry stops the process before it listens.
    
    Args:
        settings: Settings override (defaults to environment settings).
        store: Pet store to serve from (a fresh one if omitted).
        authenticators: Registry override (bearerAuth and cookieAuth by default).
        
    Returns:
        Configured FastAPI application.
        
    Raises:
        ConfigurationError: If the contract or the registry is unusable.
    """
    settings = settings or get_settings()
    contract = load_contract(settings.CONTRACT_PATH or None)
    
    if authenticators is None:
        _check_session_cookie(contract, settings)
        authenticators = build_default_registry(settings)
    authenticators.ensure_covers(contract.referenced_schemes())
    
    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        debug=settings.DEBUG,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.contract = contract
    app.state.store = store if store is not None else PetStore()
    
    # Last added runs first: access log, error responder, validator
    app.add_middleware(
        RequestValidatorMiddleware,
        contract=contract,
        authenticators=authenticators,
    )
    app.add_middleware(ErrorResponderMiddleware)
    app.add_middleware(AccessLogMiddleware)
    
    @app.get("/health")
    async def health_check():
        return {"status": "ok", "app": settings.APP_NAME}
    
    register_handlers(app, contract, PetServer(app.state.store, settings))
    
    return app


def run() -> None:
    """Serve until SIGINT/SIGTERM, then drain in-flight requests."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_output=not settings.DEBUG)
    
    config = uvicorn.Config(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=settings.SHUTDOWN_TIMEOUT_SECONDS,
    )
    logger.info("server_listening", host=settings.HOST, port=settings.PORT)
    uvicorn.Server(config).run()
