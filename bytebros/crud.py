from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from . import models, schemas
from .exceptions import ConflictError, StoreError
from .logger import logger
from .utils import clean_text


# -------------------- Credential store --------------------

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    """Look a user up by an already-normalized e-mail."""
    try:
        return db.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error("user lookup failed", exc_info=e)
        raise StoreError() from e


def create_user(
    db: Session,
    full_name: str,
    email: str,
    password_hash: str,
    phone: Optional[str] = None,
) -> models.User:
    db_user = models.User(nome_completo=full_name, email=email, telefone=phone, senha=password_hash)
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # the only unique column on usuarios is email
        raise ConflictError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("user insert failed", exc_info=e)
        raise StoreError() from e
    return db_user


# -------------------- Orders (read side) --------------------

def list_orders_for_user(db: Session, email: str) -> List[models.Order]:
    stmt = (
        select(models.Order)
        .where(models.Order.cliente_email == email)
        .options(selectinload(models.Order.itens))
        .order_by(models.Order.data_pedido.desc(), models.Order.id.desc())
    )
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error("order listing failed", exc_info=e)
        raise StoreError("Erro ao buscar pedidos.") from e


# -------------------- Catalog, news, support --------------------

def list_products(db: Session) -> List[models.Product]:
    stmt = select(models.Product).order_by(models.Product.criado_em.desc(), models.Product.id.desc())
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error("product listing failed", exc_info=e)
        raise StoreError("Erro ao buscar produtos.") from e


def create_product(db: Session, product: schemas.ProductCreate) -> models.Product:
    db_product = models.Product(**product.model_dump())
    return _insert(db, db_product, "Erro ao salvar produto.")


def list_news(db: Session) -> List[models.News]:
    stmt = select(models.News).order_by(models.News.data.desc(), models.News.id.desc())
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error("news listing failed", exc_info=e)
        raise StoreError("Erro ao buscar notícias.") from e


def create_news(db: Session, news: schemas.NewsCreate) -> models.News:
    db_news = models.News(**news.model_dump())
    return _insert(db, db_news, "Erro ao salvar notícia.")


def create_interaction(db: Session, interaction: schemas.InteractionCreate) -> models.Interaction:
    db_interaction = models.Interaction(
        nome=clean_text(interaction.nome),
        email=interaction.email,
        telefone=clean_text(interaction.telefone),
        mensagem=clean_text(interaction.mensagem),
        tipo_interacao=clean_text(interaction.tipo_interacao),
        servico_nome=clean_text(interaction.servico_nome),
    )
    return _insert(db, db_interaction, "Erro ao salvar mensagem.")


def _insert(db: Session, obj, failure_message: str):
    db.add(obj)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("insert into %s failed", obj.__tablename__, exc_info=e)
        raise StoreError(failure_message) from e
    db.refresh(obj)
    return obj
