from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .db import Base

# Table and column names follow the storefront's existing schema; the JSON
# API returns rows with these same field names.


class User(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    nome_completo = Column(String, nullable=False)
    # always stored lowercase so the unique index is effectively case-insensitive
    email = Column(String, nullable=False, unique=True, index=True)
    telefone = Column(String, nullable=True)
    # password hash, never the plaintext
    senha = Column(String, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    criado_em = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Product(Base):
    __tablename__ = "produtos"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String, nullable=False)
    descricao = Column(Text, nullable=True)
    preco = Column(Numeric(10, 2), nullable=False)
    categoria = Column(String, nullable=True)
    imagem_url = Column(String, nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


class News(Base):
    __tablename__ = "noticias"

    id = Column(Integer, primary_key=True, index=True)
    titulo = Column(String, nullable=False)
    resumo = Column(Text, nullable=True)
    conteudo = Column(Text, nullable=True)
    imagem_url = Column(String, nullable=True)
    data = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


class Interaction(Base):
    """A support request or quote request sent through the contact form."""

    __tablename__ = "interacoes"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String, nullable=True)
    email = Column(String, nullable=True)
    telefone = Column(String, nullable=True)
    mensagem = Column(Text, nullable=True)
    tipo_interacao = Column(String, nullable=True)
    servico_nome = Column(String, nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Order(Base):
    __tablename__ = "pedidos"
    __table_args__ = (
        UniqueConstraint("cliente_email", "chave_idempotencia", name="uq_pedidos_cliente_chave"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # denormalized owner reference taken from the session token, not a FK
    cliente_email = Column(String, nullable=False, index=True)
    endereco_entrega = Column(String, nullable=False)
    valor_frete = Column(Numeric(10, 2), nullable=False, default=0)
    valor_total = Column(Numeric(10, 2), nullable=False)
    forma_pagamento = Column(String, nullable=False)
    prazo_entrega = Column(String, nullable=True)
    data_pedido = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    chave_idempotencia = Column(String, nullable=True)

    itens = relationship(
        "OrderItem",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )


class OrderItem(Base):
    __tablename__ = "pedido_itens"

    id = Column(Integer, primary_key=True, index=True)
    pedido_id = Column(Integer, ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True)
    produto_id = Column(Integer, nullable=False)
    # snapshot of the catalog entry at order time
    nome_produto = Column(String, nullable=False)
    quantidade = Column(Integer, nullable=False)
    valor_unitario = Column(Numeric(10, 2), nullable=False)

    pedido = relationship("Order", back_populates="itens")
