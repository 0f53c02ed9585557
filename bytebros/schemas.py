from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

# Field names are the wire names used by the storefront client.


class RegisterRequest(BaseModel):
    # Presence is checked by AuthService so a missing field answers with the
    # same message whether it was omitted or sent empty.
    nome_completo: Optional[str] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    senha: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    senha: Optional[str] = None


class RegisterResponse(BaseModel):
    token: str
    nome: str
    email: str


class LoginResponse(RegisterResponse):
    is_admin: bool = False


class CartItem(BaseModel):
    produto_id: int
    nome_produto: str = Field(..., min_length=1)
    # positivity is a business rule enforced before the transaction opens
    quantidade: int
    valor_unitario: Decimal = Field(..., ge=0)


class OrderCreate(BaseModel):
    itens: List[CartItem]
    endereco_entrega: str = Field(..., min_length=1)
    valor_frete: Decimal = Field(default=Decimal("0"), ge=0)
    valor_total: Decimal = Field(..., ge=0)
    forma_pagamento: str = Field(..., min_length=1)
    prazo_entrega: Optional[str] = None
    chave_idempotencia: Optional[str] = Field(default=None, max_length=100)


class OrderCreated(BaseModel):
    message: str
    pedidoId: int


class OrderItemRead(BaseModel):
    id: int
    produto_id: int
    nome_produto: str
    quantidade: int
    valor_unitario: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderRead(BaseModel):
    id: int
    cliente_email: str
    endereco_entrega: str
    valor_frete: Decimal
    valor_total: Decimal
    forma_pagamento: str
    prazo_entrega: Optional[str] = None
    data_pedido: datetime
    itens: List[OrderItemRead] = []

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    nome: str = Field(..., min_length=1, max_length=200)
    descricao: Optional[str] = None
    preco: Decimal = Field(..., ge=0)
    categoria: Optional[str] = None
    imagem_url: Optional[str] = None


class ProductRead(ProductCreate):
    id: int
    criado_em: datetime

    model_config = ConfigDict(from_attributes=True)


class NewsCreate(BaseModel):
    titulo: str = Field(..., min_length=1, max_length=200)
    resumo: Optional[str] = None
    conteudo: Optional[str] = None
    imagem_url: Optional[str] = None


class NewsRead(NewsCreate):
    id: int
    data: datetime

    model_config = ConfigDict(from_attributes=True)


class InteractionCreate(BaseModel):
    nome: Optional[str] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    mensagem: Optional[str] = None
    tipo_interacao: Optional[str] = None
    servico_nome: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
