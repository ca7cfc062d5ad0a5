"""
Tests for the Supabase adapters, prompt loader and description adapter.

HTTP traffic goes through httpx.MockTransport; LiteLLM is patched.
No network access needed.
"""

import json
from decimal import Decimal
from types import SimpleNamespace
from typing import Callable
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from bazar.domain.marketplace.cart import Cart
from bazar.domain.marketplace.entities import NewOrder, NewProduct, OrderStatus, UserRole
from bazar.domain.marketplace.errors import (
    AuthenticationError,
    BackendServiceError,
    ConflictError,
    NotFoundError,
    ProductNotFoundError,
    ProfileConflictError,
    ProfileNotFoundError,
    SessionExpiredError,
)
from bazar.infrastructure.marketplace.description_adapter import GeminiDescriptionAdapter
from bazar.infrastructure.marketplace.identity_adapter import SupabaseIdentityAdapter
from bazar.infrastructure.marketplace.order_repository import SupabaseOrderRepository
from bazar.infrastructure.marketplace.product_repository import SupabaseProductRepository
from bazar.infrastructure.marketplace.profile_repository import SupabaseProfileRepository
from bazar.infrastructure.marketplace.prompt_loader import PromptLoader
from bazar.infrastructure.marketplace.rows import order_from_row, to_decimal
from bazar.infrastructure.marketplace.storage_adapter import SupabaseStorageAdapter
from bazar.infrastructure.marketplace.supabase_client import (
    SupabaseClient,
    translate_error,
)

from conftest import make_product, make_profile

BASE_URL = "https://project.supabase.test"
ANON = "anon-key"


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(respond: Callable[[httpx.Request], httpx.Response]):
    recorder = Recorder(respond)
    client = SupabaseClient(BASE_URL, ANON, transport=httpx.MockTransport(recorder))
    return client, recorder


def reply(status: int, body=None) -> Callable[[httpx.Request], httpx.Response]:
    def respond(_request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    return respond


PRODUCT_ROW = {
    "id": 7,
    "seller_id": "seller-a",
    "title": "Guitarra",
    "description": "Acústica",
    "price_usd": 19.99,
    "category": "Instrumentos Musicales",
    "image_url": "https://img.test/7.png",
    "created_at": "2024-05-01T12:00:00Z",
}


# ══════════════════════════════════════════════════════════════════════
# Client and error translation
# ══════════════════════════════════════════════════════════════════════


class TestTranslateError:
    def _response(self, status: int, body) -> httpx.Response:
        request = httpx.Request("GET", f"{BASE_URL}/rest/v1/x")
        return httpx.Response(status, json=body, request=request)

    def test_no_rows_is_not_found(self) -> None:
        error = translate_error(
            self._response(406, {"code": "PGRST116", "message": "0 rows"})
        )
        assert isinstance(error, NotFoundError)

    def test_unique_violation_is_conflict(self) -> None:
        error = translate_error(
            self._response(409, {"code": "23505", "message": "duplicate key"})
        )
        assert isinstance(error, ConflictError)
        assert error.message == "duplicate key"

    def test_auth_rejection_keeps_message(self) -> None:
        error = translate_error(
            self._response(400, {"error_description": "Invalid login credentials"}),
            auth_route=True,
        )
        assert isinstance(error, AuthenticationError)
        assert error.message == "Invalid login credentials"

    def test_same_status_off_auth_route_is_backend_error(self) -> None:
        error = translate_error(self._response(400, {"message": "bad", "code": "42P01"}))
        assert isinstance(error, BackendServiceError)
        assert error.code == "42P01"

    def test_expired_jwt_is_session_expired(self) -> None:
        error = translate_error(
            self._response(401, {"code": "PGRST301", "message": "JWT expired"})
        )
        assert isinstance(error, SessionExpiredError)
        assert error.message == "JWT expired"

    def test_unauthorized_data_request_is_session_expired(self) -> None:
        error = translate_error(self._response(401, {"message": "invalid token"}))
        assert isinstance(error, SessionExpiredError)

    def test_unauthorized_on_auth_route_stays_credentials_error(self) -> None:
        error = translate_error(
            self._response(401, {"msg": "Invalid Refresh Token"}), auth_route=True
        )
        assert type(error) is AuthenticationError


class TestSupabaseClient:
    @pytest.mark.asyncio
    async def test_sends_apikey_and_bearer(self) -> None:
        client, recorder = make_client(reply(200, []))
        async with client:
            await client.request("GET", "/rest/v1/products")
            assert recorder.last.headers["apikey"] == ANON
            assert recorder.last.headers["Authorization"] == f"Bearer {ANON}"
            assert not client.is_authorized

            client.authorize("user-token")
            await client.request("GET", "/rest/v1/products")
            assert recorder.last.headers["Authorization"] == "Bearer user-token"
            assert client.is_authorized

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self) -> None:
        client, _ = make_client(reply(204))
        async with client:
            assert await client.request("POST", "/rest/v1/profiles", json={}) is None

    @pytest.mark.asyncio
    async def test_transport_error_is_backend_error(self) -> None:
        def explode(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client, _ = make_client(explode)
        async with client:
            with pytest.raises(BackendServiceError, match="Backend unreachable"):
                await client.request("GET", "/rest/v1/products")


# ══════════════════════════════════════════════════════════════════════
# Identity
# ══════════════════════════════════════════════════════════════════════


SESSION_PAYLOAD = {
    "access_token": "jwt-1",
    "refresh_token": "refresh-1",
    "user": {"id": "u1", "email": "ana@example.com"},
}


class TestIdentityAdapter:
    @pytest.mark.asyncio
    async def test_sign_in_authorizes_client(self) -> None:
        client, recorder = make_client(reply(200, SESSION_PAYLOAD))
        async with client:
            session = await SupabaseIdentityAdapter(client).sign_in("ana@example.com", "pw")

            assert session.user_id == "u1"
            assert session.access_token == "jwt-1"
            assert recorder.last.url.path == "/auth/v1/token"
            assert recorder.last.url.params["grant_type"] == "password"
            assert client.is_authorized

    @pytest.mark.asyncio
    async def test_sign_in_rejection(self) -> None:
        client, _ = make_client(
            reply(400, {"error": "invalid_grant", "error_description": "Invalid login credentials"})
        )
        async with client:
            with pytest.raises(AuthenticationError, match="Invalid login credentials"):
                await SupabaseIdentityAdapter(client).sign_in("ana@example.com", "bad")

    @pytest.mark.asyncio
    async def test_sign_up_with_session(self) -> None:
        client, _ = make_client(reply(200, SESSION_PAYLOAD))
        async with client:
            result = await SupabaseIdentityAdapter(client).sign_up("ana@example.com", "pw")
            assert result.user_id == "u1"
            assert result.session is not None
            assert client.is_authorized

    @pytest.mark.asyncio
    async def test_sign_up_pending_confirmation(self) -> None:
        client, _ = make_client(reply(200, {"id": "u2", "email": "b@example.com"}))
        async with client:
            result = await SupabaseIdentityAdapter(client).sign_up("b@example.com", "pw")
            assert result.user_id == "u2"
            assert result.session is None
            assert not client.is_authorized

    @pytest.mark.asyncio
    async def test_sign_up_duplicate_email(self) -> None:
        client, _ = make_client(reply(422, {"msg": "User already registered"}))
        async with client:
            with pytest.raises(AuthenticationError, match="User already registered"):
                await SupabaseIdentityAdapter(client).sign_up("ana@example.com", "pw")

    @pytest.mark.asyncio
    async def test_sign_out_uses_given_token(self) -> None:
        client, recorder = make_client(reply(204))
        async with client:
            await SupabaseIdentityAdapter(client).sign_out("jwt-9")
            assert recorder.last.url.path == "/auth/v1/logout"
            assert recorder.last.headers["Authorization"] == "Bearer jwt-9"

    @pytest.mark.asyncio
    async def test_password_reset(self) -> None:
        client, recorder = make_client(reply(200, {}))
        async with client:
            await SupabaseIdentityAdapter(client).send_password_reset("ana@example.com")
            assert recorder.last.url.path == "/auth/v1/recover"
            assert json.loads(recorder.last.content) == {"email": "ana@example.com"}


# ══════════════════════════════════════════════════════════════════════
# Repositories
# ══════════════════════════════════════════════════════════════════════


class TestProfileRepository:
    @pytest.mark.asyncio
    async def test_get_by_id(self) -> None:
        row = {
            "id": "u1",
            "email": "s@example.com",
            "role": "seller",
            "full_name": "Luis",
            "company_name": "Tienda Luis",
            "logo_url": "",
        }
        client, recorder = make_client(reply(200, row))
        async with client:
            profile = await SupabaseProfileRepository(client).get_by_id("u1")

        assert profile.role is UserRole.SELLER
        assert profile.company_name == "Tienda Luis"
        assert recorder.last.url.params["id"] == "eq.u1"
        assert recorder.last.headers["Accept"] == "application/vnd.pgrst.object+json"

    @pytest.mark.asyncio
    async def test_missing_row(self) -> None:
        client, _ = make_client(
            reply(406, {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"})
        )
        async with client:
            with pytest.raises(ProfileNotFoundError):
                await SupabaseProfileRepository(client).get_by_id("ghost")

    @pytest.mark.asyncio
    async def test_duplicate_insert(self) -> None:
        client, _ = make_client(reply(409, {"code": "23505", "message": "duplicate key"}))
        async with client:
            with pytest.raises(ProfileConflictError):
                await SupabaseProfileRepository(client).insert(make_profile("u1"))


class TestProductRepository:
    @pytest.mark.asyncio
    async def test_list_filters_by_category(self) -> None:
        client, recorder = make_client(reply(200, [PRODUCT_ROW]))
        async with client:
            products = await SupabaseProductRepository(client).list_all("Instrumentos Musicales")

        assert recorder.last.url.params["category"] == "eq.Instrumentos Musicales"
        assert products[0].id == "7"
        assert products[0].price_usd == Decimal("19.99")
        assert products[0].created_at is not None

    @pytest.mark.asyncio
    async def test_list_without_category(self) -> None:
        client, recorder = make_client(reply(200, []))
        async with client:
            assert await SupabaseProductRepository(client).list_all() == []
        assert "category" not in recorder.last.url.params

    @pytest.mark.asyncio
    async def test_expired_token_surfaces_as_session_expired(self) -> None:
        client, _ = make_client(reply(401, {"code": "PGRST301", "message": "JWT expired"}))
        async with client:
            client.authorize("stale-token")
            with pytest.raises(SessionExpiredError):
                await SupabaseProductRepository(client).list_all()

    @pytest.mark.asyncio
    async def test_unknown_product(self) -> None:
        client, _ = make_client(reply(406, {"code": "PGRST116", "message": "no rows"}))
        async with client:
            with pytest.raises(ProductNotFoundError):
                await SupabaseProductRepository(client).get_by_id("404")

    @pytest.mark.asyncio
    async def test_insert_returns_stored_row(self) -> None:
        client, recorder = make_client(reply(201, [PRODUCT_ROW]))
        new = NewProduct(
            seller_id="seller-a",
            title="Guitarra",
            description="Acústica",
            price_usd=Decimal("19.99"),
            category="Instrumentos Musicales",
            image_url="https://img.test/7.png",
        )
        async with client:
            product = await SupabaseProductRepository(client).insert(new)

        assert product.id == "7"
        assert recorder.last.headers["Prefer"] == "return=representation"
        assert json.loads(recorder.last.content)["price_usd"] == 19.99


class TestOrderRepository:
    def _new_order(self) -> NewOrder:
        cart = Cart()
        cart.add(make_product("p1", "A", "10"))
        cart.add(make_product("p1", "A", "10"))
        return NewOrder(
            buyer_id="buyer-1",
            seller_id="A",
            lines=cart.lines,
            total_amount_usd=Decimal("25"),
            payment_ref_last4="1234",
            payment_proof_url="",
            delivery_needed=True,
        )

    @pytest.mark.asyncio
    async def test_insert_serializes_lines(self) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            row = json.loads(request.content)
            row.update(id=1, created_at="2024-05-01T12:00:00+00:00")
            return httpx.Response(201, json=[row])

        client, recorder = make_client(respond)
        async with client:
            order = await SupabaseOrderRepository(client).insert(self._new_order())

        sent = json.loads(recorder.last.content)
        assert sent["status"] == "pending"
        assert [item["quantity"] for item in sent["product_details"]] == [1, 1]
        assert order.id == "1"
        assert order.status is OrderStatus.PENDING
        assert order.total_amount_usd == Decimal("25")
        assert len(order.lines) == 2

    @pytest.mark.asyncio
    async def test_seller_listing_joins_buyer(self) -> None:
        row = {
            "id": 3,
            "buyer_id": "buyer-1",
            "seller_id": "A",
            "product_details": [dict(PRODUCT_ROW, quantity=1)],
            "total_amount_usd": 24.99,
            "payment_ref_last4": "1234",
            "delivery_needed": True,
            "status": "pending",
            "payment_proof_url": "https://cdn.test/p.png",
            "buyer_profile": {"full_name": "Ana", "email": "ana@example.com"},
        }
        client, recorder = make_client(reply(200, [row]))
        async with client:
            orders = await SupabaseOrderRepository(client).list_by_seller("A")

        params = recorder.last.url.params
        assert params["seller_id"] == "eq.A"
        assert params["order"] == "created_at.desc"
        assert "buyer_profile:buyer_id" in params["select"]
        assert orders[0].buyer.full_name == "Ana"

    @pytest.mark.asyncio
    async def test_buyer_listing(self) -> None:
        client, recorder = make_client(reply(200, []))
        async with client:
            assert await SupabaseOrderRepository(client).list_by_buyer("buyer-1") == []
        assert recorder.last.url.params["buyer_id"] == "eq.buyer-1"


class TestRows:
    def test_decimal_from_float_keeps_digits(self) -> None:
        assert to_decimal(19.99) == Decimal("19.99")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")

    def test_order_without_buyer_join(self) -> None:
        order = order_from_row(
            {"id": 1, "buyer_id": "b", "seller_id": "s", "status": "completed"}
        )
        assert order.buyer is None
        assert order.lines == ()
        assert order.status is OrderStatus.COMPLETED


# ══════════════════════════════════════════════════════════════════════
# Storage
# ══════════════════════════════════════════════════════════════════════


class TestStorageAdapter:
    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self) -> None:
        client, recorder = make_client(reply(200, {"Key": "images/logos/u1_1"}))
        async with client:
            url = await SupabaseStorageAdapter(client, "images").upload(
                b"png", "logos/u1_1", "image/png"
            )

        assert url == f"{BASE_URL}/storage/v1/object/public/images/logos/u1_1"
        assert recorder.last.url.path == "/storage/v1/object/images/logos/u1_1"
        assert recorder.last.headers["x-upsert"] == "true"
        assert recorder.last.headers["Content-Type"] == "image/png"

    @pytest.mark.asyncio
    async def test_failed_upload_returns_none(self) -> None:
        client, _ = make_client(reply(400, {"statusCode": "403", "message": "denied"}))
        async with client:
            assert await SupabaseStorageAdapter(client).upload(b"x", "a/b") is None

    @pytest.mark.asyncio
    async def test_empty_file_never_hits_network(self) -> None:
        client, recorder = make_client(reply(200, {}))
        async with client:
            assert await SupabaseStorageAdapter(client).upload(b"", "a/b") is None
        assert recorder.requests == []


# ══════════════════════════════════════════════════════════════════════
# Prompts and description generation
# ══════════════════════════════════════════════════════════════════════


class TestPromptLoader:
    def test_shipped_prompts(self) -> None:
        loader = PromptLoader()
        prompt = loader.get_user_prompt("Guitarra", "Instrumentos Musicales")
        assert '"Guitarra"' in prompt
        assert "Instrumentos Musicales" in prompt
        assert "50" in prompt
        assert loader.get_system_prompt()

    def test_missing_file_uses_fallbacks(self, tmp_path) -> None:
        loader = PromptLoader(tmp_path / "missing.yaml")
        assert "Guitarra" in loader.get_user_prompt("Guitarra", "Electrónica")
        assert loader.get_fallback("provider_error") == "Error generando descripción con IA."

    def test_partial_file_fills_fallbacks(self, tmp_path) -> None:
        path = tmp_path / "prompts.yaml"
        path.write_text("product_description:\n  user_template: 'Vende {title}'\n", encoding="utf-8")
        loader = PromptLoader(path)
        assert loader.get_user_prompt("Mesa", "Hogar y Muebles") == "Vende Mesa"
        assert loader.get_fallback("empty_response") == "No se pudo generar la descripción."


def _completion(text):
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class TestDescriptionAdapter:
    @pytest.mark.asyncio
    async def test_no_api_key(self) -> None:
        with patch("litellm.acompletion", new=AsyncMock()) as completion:
            text = await GeminiDescriptionAdapter("").generate("Guitarra", "Electrónica")
        assert text.startswith("Error: API Key de Gemini no configurada")
        completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_returns_model_text(self) -> None:
        with patch(
            "litellm.acompletion", new=AsyncMock(return_value=_completion("  Suena increíble.  "))
        ) as completion:
            text = await GeminiDescriptionAdapter("key", model="gemini/test").generate(
                "Guitarra", "Instrumentos Musicales"
            )

        assert text == "Suena increíble."
        kwargs = completion.await_args.kwargs
        assert kwargs["model"] == "gemini/test"
        assert kwargs["api_key"] == "key"
        assert "Guitarra" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_provider_error(self) -> None:
        with patch("litellm.acompletion", new=AsyncMock(side_effect=RuntimeError("quota"))):
            text = await GeminiDescriptionAdapter("key").generate("Guitarra", "Electrónica")
        assert text == "Error generando descripción con IA."

    @pytest.mark.asyncio
    async def test_empty_response(self) -> None:
        with patch("litellm.acompletion", new=AsyncMock(return_value=_completion(None))):
            text = await GeminiDescriptionAdapter("key").generate("Guitarra", "Electrónica")
        assert text == "No se pudo generar la descripción."
