"""
Dependency injection for the marketplace bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the marketplace context.

A SupabaseClient is created per request; FastAPI caches it for the
request, so every adapter in that request shares its bearer token.
"""

from typing import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bazar.application.marketplace.bootstrap_profile import BootstrapProfileUseCase
from bazar.application.marketplace.create_product import CreateProductUseCase
from bazar.application.marketplace.generate_description import (
    GenerateDescriptionUseCase,
)
from bazar.application.marketplace.list_orders import (
    ListBuyerOrdersUseCase,
    ListSellerOrdersUseCase,
)
from bazar.application.marketplace.list_products import (
    ListProductsUseCase,
    ListSellerProductsUseCase,
)
from bazar.application.marketplace.manage_cart import ManageCartUseCase
from bazar.application.marketplace.place_order import PlaceOrderUseCase
from bazar.application.marketplace.register_account import RegisterAccountUseCase
from bazar.application.marketplace.reset_password import ResetPasswordUseCase
from bazar.application.marketplace.session import SessionContext, SessionRegistry
from bazar.application.marketplace.sign_in import SignInUseCase
from bazar.application.marketplace.sign_out import SignOutUseCase
from bazar.core.config import settings
from bazar.domain.marketplace.errors import SessionNotFoundError
from bazar.domain.marketplace.ports import (
    DescriptionGeneratorPort,
    IdentityPort,
    ObjectStoragePort,
    OrderRepository,
    ProductRepository,
    ProfileRepository,
)
from bazar.infrastructure.marketplace.description_adapter import (
    GeminiDescriptionAdapter,
)
from bazar.infrastructure.marketplace.identity_adapter import SupabaseIdentityAdapter
from bazar.infrastructure.marketplace.order_repository import SupabaseOrderRepository
from bazar.infrastructure.marketplace.product_repository import (
    SupabaseProductRepository,
)
from bazar.infrastructure.marketplace.profile_repository import (
    SupabaseProfileRepository,
)
from bazar.infrastructure.marketplace.storage_adapter import SupabaseStorageAdapter
from bazar.infrastructure.marketplace.supabase_client import SupabaseClient
from bazar.shared.retry import RetryPolicy

_bearer = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------
# Infrastructure
# ------------------------------------------------------------------


async def get_supabase_client() -> AsyncIterator[SupabaseClient]:
    """Yield a request-scoped Supabase client and close it afterwards."""
    client = SupabaseClient(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout=settings.http_timeout_seconds,
    )
    try:
        yield client
    finally:
        await client.aclose()


def get_session_registry(request: Request) -> SessionRegistry:
    """Return the registry created at application startup."""
    return request.app.state.session_registry


def get_identity(client: SupabaseClient = Depends(get_supabase_client)) -> IdentityPort:
    return SupabaseIdentityAdapter(client)


def get_profile_repository(
    client: SupabaseClient = Depends(get_supabase_client),
) -> ProfileRepository:
    return SupabaseProfileRepository(client)


def get_product_repository(
    client: SupabaseClient = Depends(get_supabase_client),
) -> ProductRepository:
    return SupabaseProductRepository(client)


def get_order_repository(
    client: SupabaseClient = Depends(get_supabase_client),
) -> OrderRepository:
    return SupabaseOrderRepository(client)


def get_storage(
    client: SupabaseClient = Depends(get_supabase_client),
) -> ObjectStoragePort:
    return SupabaseStorageAdapter(client, bucket=settings.storage_bucket)


def get_description_generator() -> DescriptionGeneratorPort:
    return GeminiDescriptionAdapter(
        api_key=settings.gemini_api_key,
        model=settings.description_model,
        temperature=settings.description_temperature,
        max_tokens=settings.description_max_tokens,
    )


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    registry: SessionRegistry = Depends(get_session_registry),
    client: SupabaseClient = Depends(get_supabase_client),
) -> SessionContext:
    """Resolve the bearer token to an open session.

    Raises:
        SessionNotFoundError: If the header is missing or the token has
            no open session.
    """
    if credentials is None or not credentials.credentials:
        raise SessionNotFoundError()
    session = registry.get(credentials.credentials)
    client.authorize(session.access_token)
    return session


# ------------------------------------------------------------------
# Use cases
# ------------------------------------------------------------------


def get_bootstrap_profile_use_case(
    profile_repo: ProfileRepository = Depends(get_profile_repository),
) -> BootstrapProfileUseCase:
    """Build BootstrapProfileUseCase with the configured retry policy."""
    return BootstrapProfileUseCase(
        profile_repo=profile_repo,
        policy=RetryPolicy(
            max_attempts=settings.profile_lookup_attempts,
            delay_seconds=settings.profile_lookup_delay_seconds,
        ),
    )


def get_sign_in_use_case(
    identity: IdentityPort = Depends(get_identity),
    bootstrap: BootstrapProfileUseCase = Depends(get_bootstrap_profile_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SignInUseCase:
    return SignInUseCase(identity=identity, bootstrap=bootstrap, registry=registry)


def get_register_account_use_case(
    identity: IdentityPort = Depends(get_identity),
    profile_repo: ProfileRepository = Depends(get_profile_repository),
    storage: ObjectStoragePort = Depends(get_storage),
    bootstrap: BootstrapProfileUseCase = Depends(get_bootstrap_profile_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
) -> RegisterAccountUseCase:
    return RegisterAccountUseCase(
        identity=identity,
        profile_repo=profile_repo,
        storage=storage,
        bootstrap=bootstrap,
        registry=registry,
    )


def get_sign_out_use_case(
    identity: IdentityPort = Depends(get_identity),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SignOutUseCase:
    return SignOutUseCase(identity=identity, registry=registry)


def get_reset_password_use_case(
    identity: IdentityPort = Depends(get_identity),
) -> ResetPasswordUseCase:
    return ResetPasswordUseCase(identity=identity)


def get_list_products_use_case(
    product_repo: ProductRepository = Depends(get_product_repository),
) -> ListProductsUseCase:
    return ListProductsUseCase(product_repo=product_repo, rate=settings.bcv_rate)


def get_list_seller_products_use_case(
    product_repo: ProductRepository = Depends(get_product_repository),
) -> ListSellerProductsUseCase:
    return ListSellerProductsUseCase(product_repo=product_repo, rate=settings.bcv_rate)


def get_manage_cart_use_case(
    product_repo: ProductRepository = Depends(get_product_repository),
) -> ManageCartUseCase:
    return ManageCartUseCase(
        product_repo=product_repo,
        rate=settings.bcv_rate,
        delivery_fee=settings.delivery_fee_usd,
    )


def get_place_order_use_case(
    order_repo: OrderRepository = Depends(get_order_repository),
    storage: ObjectStoragePort = Depends(get_storage),
) -> PlaceOrderUseCase:
    return PlaceOrderUseCase(
        order_repo=order_repo,
        storage=storage,
        delivery_fee=settings.delivery_fee_usd,
    )


def get_create_product_use_case(
    product_repo: ProductRepository = Depends(get_product_repository),
    storage: ObjectStoragePort = Depends(get_storage),
) -> CreateProductUseCase:
    return CreateProductUseCase(
        product_repo=product_repo,
        storage=storage,
        placeholder_image_url=settings.placeholder_image_url,
    )


def get_generate_description_use_case(
    generator: DescriptionGeneratorPort = Depends(get_description_generator),
) -> GenerateDescriptionUseCase:
    return GenerateDescriptionUseCase(generator=generator)


def get_list_buyer_orders_use_case(
    order_repo: OrderRepository = Depends(get_order_repository),
) -> ListBuyerOrdersUseCase:
    return ListBuyerOrdersUseCase(order_repo=order_repo)


def get_list_seller_orders_use_case(
    order_repo: OrderRepository = Depends(get_order_repository),
) -> ListSellerOrdersUseCase:
    return ListSellerOrdersUseCase(order_repo=order_repo)
