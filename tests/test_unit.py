import pytest
from decimal import Decimal

from bytebros import crud, models, schemas
from bytebros.auth import verify_password
from bytebros.exceptions import AuthenticationError, ConflictError, StoreError, ValidationError
from bytebros.services import AuthService


@pytest.fixture
def auth_service(session_factory, signer):
    return AuthService(session_factory, signer)


def test_register_stores_hash_not_plaintext(auth_service, db_session):
    auth_service.register("Alice", "alice@example.com", "s3gredo!")
    user = crud.get_user_by_email(db_session, "alice@example.com")
    assert user is not None
    assert user.senha != "s3gredo!"
    assert verify_password("s3gredo!", user.senha)
    assert user.is_admin is False


def test_register_normalizes_email(auth_service, db_session):
    resp = auth_service.register("Alice", "  Alice@Example.COM ", "pw")
    assert resp.email == "alice@example.com"
    assert crud.get_user_by_email(db_session, "alice@example.com") is not None


@pytest.mark.parametrize("name,email,password", [
    (None, "a@b.com", "pw"),
    ("", "a@b.com", "pw"),
    ("   ", "a@b.com", "pw"),
    ("Ana", None, "pw"),
    ("Ana", "   ", "pw"),
    ("Ana", "a@b.com", ""),
])
def test_register_requires_name_email_password(auth_service, db_session, name, email, password):
    with pytest.raises(ValidationError):
        auth_service.register(name, email, password)
    assert db_session.query(models.User).count() == 0


def test_register_duplicate_email_is_generic_by_default(auth_service):
    auth_service.register("Alice", "alice@example.com", "pw")
    with pytest.raises(ConflictError) as exc:
        auth_service.register("Other", "ALICE@example.com", "pw2")
    assert exc.value.status_code == 500
    assert "e-mail" not in exc.value.message.lower()


def test_register_duplicate_email_explicit_policy(session_factory, signer):
    service = AuthService(session_factory, signer, email_conflict_policy="explicit")
    service.register("Alice", "alice@example.com", "pw")
    with pytest.raises(ConflictError) as exc:
        service.register("Other", "alice@example.com", "pw2")
    assert exc.value.status_code == 409
    assert "e-mail" in exc.value.message.lower()


def test_login_is_case_insensitive(auth_service):
    auth_service.register("Alice", "A@b.com", "pw")
    resp = auth_service.login("a@B.com", "pw")
    assert resp.email == "a@b.com"
    assert resp.nome == "Alice"
    assert resp.is_admin is False


def test_login_failures_are_indistinguishable(auth_service):
    auth_service.register("Alice", "alice@example.com", "right")
    with pytest.raises(AuthenticationError) as wrong_pw:
        auth_service.login("alice@example.com", "wrong")
    with pytest.raises(AuthenticationError) as no_user:
        auth_service.login("nobody@example.com", "right")
    assert wrong_pw.value.message == no_user.value.message
    assert wrong_pw.value.status_code == no_user.value.status_code == 401


def test_login_token_carries_admin_flag(auth_service, db_session, signer):
    auth_service.register("Root", "root@example.com", "pw")
    user = crud.get_user_by_email(db_session, "root@example.com")
    user.is_admin = True
    db_session.commit()

    resp = auth_service.login("root@example.com", "pw")
    assert resp.is_admin is True
    claims = signer.verify_access_token(resp.token).claims
    assert claims.is_admin is True
    assert claims.user_id == user.id


def test_create_interaction_strips_markup(db_session):
    row = crud.create_interaction(db_session, schemas.InteractionCreate(
        nome="<b>Maria</b>", email="maria@x.com", mensagem="<script>x</script>Preciso de ajuda",
        tipo_interacao="suporte", servico_nome="Formatação",
    ))
    assert row.id is not None
    assert row.nome == "Maria"
    assert "<script>" not in row.mensagem
    assert "Preciso de ajuda" in row.mensagem


def test_products_listed_newest_first(db_session):
    first = crud.create_product(db_session, schemas.ProductCreate(nome="Mouse", preco=Decimal("50")))
    second = crud.create_product(db_session, schemas.ProductCreate(nome="Teclado", preco=Decimal("120.5")))
    products = crud.list_products(db_session)
    assert [p.id for p in products] == [second.id, first.id]
    assert products[0].preco == Decimal("120.50")


def test_read_failure_becomes_store_error(db_session, db_engine):
    models.News.__table__.drop(db_engine)
    with pytest.raises(StoreError):
        crud.list_news(db_session)


def test_create_interaction_keeps_ampersand_and_angle_brackets(db_session):
    row = crud.create_interaction(db_session, schemas.InteractionCreate(
        nome="Silva & Filhos", email="compras&ti@x.com", mensagem="Notebook Dell & HP < 3000",
    ))
    assert row.nome == "Silva & Filhos"
    assert row.email == "compras&ti@x.com"
    assert row.mensagem == "Notebook Dell & HP < 3000"
