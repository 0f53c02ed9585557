"""Registration/login and the order-creation transaction.

Both services receive their session factory at construction time; each call
opens its own session, so one service instance is safe to share between
concurrent requests.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import crud, models, schemas
from .auth import Claims, TokenSigner, dummy_verify, hash_password, verify_password
from .exceptions import AuthenticationError, ConflictError, OrderCreationFailed, StoreError, ValidationError
from .logger import logger
from .utils import normalize_email

REGISTRATION_FAILED = "Erro ao registrar usuário."
EMAIL_IN_USE = "E-mail já está em uso."


class AuthService:
    def __init__(self, session_factory: sessionmaker, signer: TokenSigner, email_conflict_policy: str = "generic"):
        self._session_factory = session_factory
        self._signer = signer
        self._conflict_policy = email_conflict_policy

    def register(
        self,
        full_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        phone: Optional[str] = None,
    ) -> schemas.RegisterResponse:
        if not full_name or not full_name.strip() or not email or not email.strip() or not password:
            raise ValidationError("Nome, email e senha são obrigatórios.")
        email = normalize_email(email)
        password_hash = hash_password(password)

        with self._session_factory() as db:
            try:
                user = crud.create_user(db, full_name.strip(), email, password_hash, phone=phone or None)
            except ConflictError as e:
                logger.warning("registration rejected: e-mail already registered")
                if self._conflict_policy == "explicit":
                    raise ConflictError(EMAIL_IN_USE, status_code=409) from e
                # same status and message as any other failed insert
                raise ConflictError(REGISTRATION_FAILED, status_code=500) from e
            except StoreError as e:
                raise StoreError(REGISTRATION_FAILED) from e
            user_id, user_email, user_name = user.id, user.email, user.nome_completo

        logger.info("user registered", extra={"user_id": user_id})
        token = self._signer.create_access_token(user_id, user_email)
        return schemas.RegisterResponse(token=token, nome=user_name, email=user_email)

    def login(self, email: Optional[str], password: Optional[str]) -> schemas.LoginResponse:
        if not email or not password:
            raise ValidationError("Email e senha são obrigatórios.")
        email = normalize_email(email)

        with self._session_factory() as db:
            user = crud.get_user_by_email(db, email)
            if user is None:
                dummy_verify()
                logger.warning("login failed")
                raise AuthenticationError()
            if not verify_password(password, user.senha):
                logger.warning("login failed", extra={"user_id": user.id})
                raise AuthenticationError()
            is_admin = bool(user.is_admin)
            token = self._signer.create_access_token(user.id, user.email, is_admin=is_admin)
            return schemas.LoginResponse(token=token, nome=user.nome_completo, email=user.email, is_admin=is_admin)


def validate_cart(cart: schemas.OrderCreate) -> None:
    if not cart.itens:
        raise ValidationError("O pedido deve conter ao menos um item.")
    for item in cart.itens:
        if item.quantidade <= 0:
            raise ValidationError("A quantidade de cada item deve ser maior que zero.")


class OrderTransactionManager:
    """Writes an order header and all of its line items as one unit of work.

    Either the header and every line item are committed together, or the
    transaction is rolled back and OrderCreationFailed is raised. The session
    (and with it the pooled connection) is released on every exit path.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create_order(self, identity: Claims, cart: schemas.OrderCreate) -> int:
        validate_cart(cart)

        db: Session = self._session_factory()
        try:
            if cart.chave_idempotencia:
                existing = self._find_by_idempotency_key(db, identity.email, cart.chave_idempotencia)
                if existing is not None:
                    db.rollback()
                    logger.info("order replayed", extra={"order_id": existing})
                    return existing

            order = models.Order(
                cliente_email=identity.email,
                endereco_entrega=cart.endereco_entrega,
                valor_frete=cart.valor_frete,
                valor_total=cart.valor_total,
                forma_pagamento=cart.forma_pagamento,
                prazo_entrega=cart.prazo_entrega,
                chave_idempotencia=cart.chave_idempotencia,
            )
            db.add(order)
            db.flush()
            order_id = order.id

            for item in cart.itens:
                db.add(
                    models.OrderItem(
                        pedido_id=order_id,
                        produto_id=item.produto_id,
                        nome_produto=item.nome_produto,
                        quantidade=item.quantidade,
                        valor_unitario=item.valor_unitario,
                    )
                )
                # one statement per item, in cart order; the first failure stops the loop
                db.flush()

            db.commit()
        except Exception as e:
            try:
                db.rollback()
            except SQLAlchemyError as rollback_error:
                logger.error("rollback after failed order also failed", exc_info=rollback_error)
            logger.error("order creation failed, rolled back", extra={"user_id": identity.user_id}, exc_info=e)
            raise OrderCreationFailed() from e
        finally:
            db.close()

        logger.info("order created", extra={"order_id": order_id, "items": len(cart.itens)})
        return order_id

    @staticmethod
    def _find_by_idempotency_key(db: Session, email: str, key: str) -> Optional[int]:
        stmt = select(models.Order.id).where(
            models.Order.cliente_email == email,
            models.Order.chave_idempotencia == key,
        )
        return db.execute(stmt).scalar_one_or_none()
