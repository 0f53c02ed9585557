from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from . import crud, schemas
from .auth import AuthGate, Claims, TokenSigner
from .config import Settings
from .db import Base, build_engine, build_session_factory
from .exceptions import Forbidden, ShopError, StoreError
from .logger import configure_logging, logger
from .services import AuthService, OrderTransactionManager


# -------------------- Dependencies --------------------

def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def require_identity(request: Request) -> Claims:
    """Auth gate for protected routes; attaches the verified claims to the request."""
    identity = request.app.state.gate.authenticate(request.headers.get("authorization"))
    request.state.identity = identity
    return identity


def require_admin(identity: Claims = Depends(require_identity)) -> Claims:
    if not identity.is_admin:
        raise Forbidden("Acesso restrito a administradores.")
    return identity


# -------------------- Error handlers --------------------

async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request failed", extra={"path": request.url.path, "error": exc.__class__.__name__})
    return JSONResponse(status_code=exc.status_code, content={"erro": exc.message}, headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled error", extra={"path": request.url.path}, exc_info=exc)
    return JSONResponse(status_code=500, content={"erro": StoreError.default_message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    return JSONResponse(status_code=400, content={"erro": "Dados inválidos.", "campos": fields})


# -------------------- App factory --------------------

def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    engine = engine or build_engine(settings.database_url, pool_timeout=settings.pool_timeout)
    session_factory = build_session_factory(engine)
    signer = TokenSigner(settings.jwt_secret, ttl_seconds=settings.token_ttl_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables if not existing. In production, manage the schema with migrations.
        Base.metadata.create_all(bind=engine)
        logger.info("service started", extra={"origins": settings.get_allowed_origins_list()})
        yield
        engine.dispose()

    app = FastAPI(title="ByteBros.TI API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.gate = AuthGate(signer)
    app.state.auth_service = AuthService(session_factory, signer, settings.email_conflict_policy)
    app.state.orders = OrderTransactionManager(session_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    register_routes(app)
    return app


def register_routes(app: FastAPI) -> None:
    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "API da ByteBros.TI no ar! Tudo funcionando."

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # Handlers that touch the database are plain ``def`` so FastAPI runs them in
    # its threadpool; blocking store calls never stall the event loop.

    # -------------------- Auth --------------------
    @app.post("/api/auth/registrar", response_model=schemas.RegisterResponse, status_code=201)
    def register(payload: schemas.RegisterRequest, request: Request):
        return request.app.state.auth_service.register(
            payload.nome_completo, payload.email, payload.senha, phone=payload.telefone
        )

    @app.post("/api/auth/login", response_model=schemas.LoginResponse)
    def login(payload: schemas.LoginRequest, request: Request):
        return request.app.state.auth_service.login(payload.email, payload.senha)

    # -------------------- Public --------------------
    @app.get("/api/produtos", response_model=List[schemas.ProductRead])
    def list_products(db: Session = Depends(get_db)):
        return crud.list_products(db)

    @app.post("/api/produtos", response_model=schemas.ProductRead, status_code=201)
    def create_product(
        product: schemas.ProductCreate,
        db: Session = Depends(get_db),
        admin: Claims = Depends(require_admin),
    ):
        return crud.create_product(db, product)

    @app.get("/api/noticias", response_model=List[schemas.NewsRead])
    def list_news(db: Session = Depends(get_db)):
        return crud.list_news(db)

    @app.post("/api/noticias", response_model=schemas.NewsRead, status_code=201)
    def create_news(
        news: schemas.NewsCreate,
        db: Session = Depends(get_db),
        admin: Claims = Depends(require_admin),
    ):
        return crud.create_news(db, news)

    @app.post("/api/suporte", response_model=schemas.MessageResponse, status_code=201)
    def create_interaction(interaction: schemas.InteractionCreate, db: Session = Depends(get_db)):
        crud.create_interaction(db, interaction)
        return {"message": "Mensagem recebida com sucesso!"}

    # -------------------- Protected --------------------
    @app.post("/api/pedidos", response_model=schemas.OrderCreated, status_code=201)
    def create_order(cart: schemas.OrderCreate, request: Request, identity: Claims = Depends(require_identity)):
        order_id = request.app.state.orders.create_order(identity, cart)
        return {"message": "Pedido criado com sucesso!", "pedidoId": order_id}

    @app.get("/api/meus-pedidos", response_model=List[schemas.OrderRead])
    def my_orders(identity: Claims = Depends(require_identity), db: Session = Depends(get_db)):
        return crud.list_orders_for_user(db, identity.email)


app = create_app()
