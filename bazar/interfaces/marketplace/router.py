"""
FastAPI router for the marketplace bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas and form parameters.
Error mapping is handled by centralized error handlers.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from bazar.application.marketplace.create_product import CreateProductUseCase
from bazar.application.marketplace.dtos import (
    CartView,
    CreateProductCommand,
    GenerateDescriptionQuery,
    PlaceOrderCommand,
    ProductListing,
    RegisterAccountCommand,
    SignInCommand,
    UploadedFile,
)
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
    to_listings,
)
from bazar.application.marketplace.manage_cart import ManageCartUseCase
from bazar.application.marketplace.place_order import PlaceOrderUseCase
from bazar.application.marketplace.register_account import RegisterAccountUseCase
from bazar.application.marketplace.reset_password import ResetPasswordUseCase
from bazar.application.marketplace.session import SessionContext
from bazar.application.marketplace.sign_in import SignInUseCase
from bazar.application.marketplace.sign_out import SignOutUseCase
from bazar.core.config import settings
from bazar.domain.marketplace.catalog import ALL_CATEGORIES, CATEGORIES
from bazar.domain.marketplace.currency import format_money
from bazar.domain.marketplace.entities import Order, Profile
from bazar.interfaces.marketplace.dependencies import (
    get_create_product_use_case,
    get_current_session,
    get_generate_description_use_case,
    get_list_buyer_orders_use_case,
    get_list_products_use_case,
    get_list_seller_orders_use_case,
    get_list_seller_products_use_case,
    get_manage_cart_use_case,
    get_place_order_use_case,
    get_register_account_use_case,
    get_reset_password_use_case,
    get_sign_in_use_case,
    get_sign_out_use_case,
)
from bazar.interfaces.marketplace.schemas import (
    AddCartItemRequest,
    BuyerItem,
    CartResponse,
    CategoriesResponse,
    CheckoutQuoteResponse,
    CheckoutResponse,
    CurrencyResponse,
    DescriptionRequest,
    DescriptionResponse,
    ErrorResponse,
    MessageResponse,
    OrderItem,
    OrderLineItem,
    OrderListResponse,
    PasswordResetRequest,
    ProductItem,
    ProductListResponse,
    ProfileItem,
    RegistrationResponse,
    SessionResponse,
    SignInRequest,
    SignInResponse,
)
from bazar.shared.security.rate_limiting import limiter

router = APIRouter()

UNAUTHORIZED = {401: {"model": ErrorResponse}}
FORBIDDEN = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


# ------------------------------------------------------------------
# Mapping helpers
# ------------------------------------------------------------------


def _profile_item(profile: Profile) -> ProfileItem:
    return ProfileItem(
        id=profile.id,
        email=profile.email,
        role=profile.role.value,
        full_name=profile.full_name,
        company_name=profile.company_name,
        logo_url=profile.logo_url,
    )


def _product_item(listing: ProductListing) -> ProductItem:
    p = listing.product
    return ProductItem(
        id=p.id,
        seller_id=p.seller_id,
        title=p.title,
        description=p.description,
        price_usd=p.price_usd,
        category=p.category,
        image_url=p.image_url,
        created_at=p.created_at,
        price_display=listing.price_display,
    )


def _order_item(order: Order) -> OrderItem:
    return OrderItem(
        id=order.id,
        buyer_id=order.buyer_id,
        seller_id=order.seller_id,
        lines=[
            OrderLineItem(
                product_id=line.product_id,
                title=line.product.title,
                price_usd=line.price_usd,
                quantity=line.quantity,
                image_url=line.product.image_url,
            )
            for line in order.lines
        ],
        total_amount_usd=order.total_amount_usd,
        payment_ref_last4=order.payment_ref_last4,
        payment_proof_url=order.payment_proof_url,
        delivery_needed=order.delivery_needed,
        status=order.status.value,
        created_at=order.created_at,
        buyer=(
            BuyerItem(full_name=order.buyer.full_name, email=order.buyer.email)
            if order.buyer
            else None
        ),
    )


def _cart_response(view: CartView, session: SessionContext) -> CartResponse:
    return CartResponse(
        items=[_product_item(listing) for listing in view.listings],
        count=len(view.listings),
        subtotal_usd=view.subtotal_usd,
        subtotal_display=view.subtotal_display,
        currency=session.currency.value,
    )


async def _read_upload(upload: UploadFile | None) -> UploadedFile | None:
    """Read an optional multipart file. Empty uploads count as absent."""
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    if not data:
        return None
    return UploadedFile(
        data=data,
        content_type=upload.content_type or "application/octet-stream",
        filename=upload.filename,
    )


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------


@router.post(
    "/auth/register",
    response_model=RegistrationResponse,
    status_code=201,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["auth"],
    summary="Register an account",
    description="Create a buyer or seller account. Sellers may attach a logo.",
)
async def register(
    email: str = Form(...),
    password: str = Form(...),
    role: str = Form(...),
    full_name: str = Form(...),
    company_name: str | None = Form(None),
    logo: UploadFile | None = File(None),
    use_case: RegisterAccountUseCase = Depends(get_register_account_use_case),
) -> RegistrationResponse:
    """Register an account and sign it in when no confirmation is pending."""
    command = RegisterAccountCommand(
        email=email,
        password=password,
        role=role,
        full_name=full_name,
        company_name=company_name,
        logo=await _read_upload(logo),
    )
    result = await use_case.execute(command)
    return RegistrationResponse(
        user_id=result.user_id,
        message=result.message,
        access_token=result.access_token,
        profile=_profile_item(result.profile) if result.profile else None,
    )


@router.post(
    "/auth/sign-in",
    response_model=SignInResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["auth"],
    summary="Sign in",
)
async def sign_in(
    request: SignInRequest,
    use_case: SignInUseCase = Depends(get_sign_in_use_case),
) -> SignInResponse:
    """Sign in with email and password and open a session."""
    result = await use_case.execute(
        SignInCommand(email=request.email, password=request.password)
    )
    return SignInResponse(
        access_token=result.access_token,
        profile=_profile_item(result.profile),
    )


@router.post(
    "/auth/sign-out",
    response_model=MessageResponse,
    responses=UNAUTHORIZED,
    tags=["auth"],
    summary="Sign out",
)
async def sign_out(
    session: SessionContext = Depends(get_current_session),
    use_case: SignOutUseCase = Depends(get_sign_out_use_case),
) -> MessageResponse:
    """Close the session. The cart is discarded."""
    await use_case.execute(session)
    return MessageResponse(message="Sesión cerrada.")


@router.post(
    "/auth/password-reset",
    response_model=MessageResponse,
    responses={422: {"model": ErrorResponse}},
    tags=["auth"],
    summary="Send a password recovery email",
)
async def password_reset(
    request: PasswordResetRequest,
    use_case: ResetPasswordUseCase = Depends(get_reset_password_use_case),
) -> MessageResponse:
    message = await use_case.execute(request.email)
    return MessageResponse(message=message)


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


@router.get(
    "/session",
    response_model=SessionResponse,
    responses=UNAUTHORIZED,
    tags=["session"],
    summary="Current session",
)
async def get_session(
    session: SessionContext = Depends(get_current_session),
) -> SessionResponse:
    return SessionResponse(
        profile=_profile_item(session.profile),
        currency=session.currency.value,
        cart_count=len(session.cart),
    )


@router.post(
    "/session/currency/toggle",
    response_model=CurrencyResponse,
    responses=UNAUTHORIZED,
    tags=["session"],
    summary="Toggle display currency",
    description="Flip the session's display currency between USD and VES.",
)
async def toggle_currency(
    session: SessionContext = Depends(get_current_session),
) -> CurrencyResponse:
    return CurrencyResponse(currency=session.toggle_currency().value)


# ------------------------------------------------------------------
# Catalog
# ------------------------------------------------------------------


@router.get(
    "/catalog/categories",
    response_model=CategoriesResponse,
    tags=["catalog"],
    summary="List categories",
)
def list_categories() -> CategoriesResponse:
    return CategoriesResponse(all_label=ALL_CATEGORIES, categories=list(CATEGORIES))


@router.get(
    "/catalog/products",
    response_model=ProductListResponse,
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["catalog"],
    summary="Browse products",
    description="List products, optionally filtered by category. "
    f'"{ALL_CATEGORIES}" or no category returns everything.',
)
async def list_products(
    category: str | None = None,
    session: SessionContext = Depends(get_current_session),
    use_case: ListProductsUseCase = Depends(get_list_products_use_case),
) -> ProductListResponse:
    listings = await use_case.execute(category, session.currency)
    return ProductListResponse(products=[_product_item(item) for item in listings])


# ------------------------------------------------------------------
# Cart
# ------------------------------------------------------------------


@router.get(
    "/cart",
    response_model=CartResponse,
    responses=UNAUTHORIZED,
    tags=["cart"],
    summary="View cart",
)
async def view_cart(
    session: SessionContext = Depends(get_current_session),
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),
) -> CartResponse:
    return _cart_response(use_case.view(session), session)


@router.post(
    "/cart/items",
    response_model=CartResponse,
    status_code=201,
    responses={**FORBIDDEN, 404: {"model": ErrorResponse}},
    tags=["cart"],
    summary="Add a product to the cart",
    description="The product's current price is frozen into the cart line.",
)
async def add_cart_item(
    request: AddCartItemRequest,
    session: SessionContext = Depends(get_current_session),
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),
) -> CartResponse:
    await use_case.add(session, request.product_id)
    return _cart_response(use_case.view(session), session)


@router.delete(
    "/cart/items/{product_id}",
    response_model=CartResponse,
    responses=UNAUTHORIZED,
    tags=["cart"],
    summary="Remove one line for a product",
)
async def remove_cart_item(
    product_id: str,
    session: SessionContext = Depends(get_current_session),
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),
) -> CartResponse:
    use_case.remove_first(session, product_id)
    return _cart_response(use_case.view(session), session)


@router.delete(
    "/cart",
    response_model=CartResponse,
    responses=UNAUTHORIZED,
    tags=["cart"],
    summary="Empty the cart",
)
async def clear_cart(
    session: SessionContext = Depends(get_current_session),
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),
) -> CartResponse:
    use_case.clear(session)
    return _cart_response(use_case.view(session), session)


@router.get(
    "/cart/quote",
    response_model=CheckoutQuoteResponse,
    responses={**UNAUTHORIZED, 422: {"model": ErrorResponse}},
    tags=["cart"],
    summary="Price the checkout",
    description="Grand total including delivery fees, in the session currency and in VES.",
)
async def quote_cart(
    delivery: bool = False,
    session: SessionContext = Depends(get_current_session),
    use_case: ManageCartUseCase = Depends(get_manage_cart_use_case),
) -> CheckoutQuoteResponse:
    quote = use_case.quote(session, delivery)
    return CheckoutQuoteResponse(
        seller_count=quote.seller_count,
        delivery=delivery,
        total_usd=quote.total_usd,
        total_display=quote.total_display,
        total_ves_display=quote.total_ves_display,
        delivery_fee_usd=quote.delivery_fee_usd,
        delivery_fee_display=quote.delivery_fee_display,
    )


# ------------------------------------------------------------------
# Checkout and orders
# ------------------------------------------------------------------


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=201,
    responses={
        **FORBIDDEN,
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    tags=["orders"],
    summary="Check out the cart",
    description="Create one pending order per seller in the cart.",
)
async def checkout(
    payment_ref: str = Form(...),
    delivery: bool = Form(False),
    proof: UploadFile | None = File(None),
    session: SessionContext = Depends(get_current_session),
    use_case: PlaceOrderUseCase = Depends(get_place_order_use_case),
) -> CheckoutResponse:
    """Place orders for the cart and clear it."""
    command = PlaceOrderCommand(
        delivery=delivery,
        payment_ref=payment_ref,
        proof=await _read_upload(proof),
    )
    result = await use_case.execute(session, command)
    return CheckoutResponse(
        orders=[_order_item(o) for o in result.orders],
        proof_url=result.proof_url,
        total_usd=result.total_usd,
        total_display=format_money(result.total_usd, session.currency, settings.bcv_rate),
        message=result.message,
    )


@router.get(
    "/orders/mine",
    response_model=OrderListResponse,
    responses=FORBIDDEN,
    tags=["orders"],
    summary="Purchase history",
)
async def list_my_orders(
    session: SessionContext = Depends(get_current_session),
    use_case: ListBuyerOrdersUseCase = Depends(get_list_buyer_orders_use_case),
) -> OrderListResponse:
    orders = await use_case.execute(session)
    return OrderListResponse(orders=[_order_item(o) for o in orders])


# ------------------------------------------------------------------
# Seller
# ------------------------------------------------------------------


@router.get(
    "/seller/products",
    response_model=ProductListResponse,
    responses=FORBIDDEN,
    tags=["seller"],
    summary="Seller's own products",
)
async def list_seller_products(
    session: SessionContext = Depends(get_current_session),
    use_case: ListSellerProductsUseCase = Depends(get_list_seller_products_use_case),
) -> ProductListResponse:
    listings = await use_case.execute(session)
    return ProductListResponse(products=[_product_item(item) for item in listings])


@router.post(
    "/seller/products",
    response_model=ProductItem,
    status_code=201,
    responses={**FORBIDDEN, 422: {"model": ErrorResponse}},
    tags=["seller"],
    summary="List a new product",
)
async def create_product(
    title: str = Form(...),
    price_usd: Decimal = Form(...),
    category: str = Form(...),
    description: str = Form(""),
    image: UploadFile | None = File(None),
    session: SessionContext = Depends(get_current_session),
    use_case: CreateProductUseCase = Depends(get_create_product_use_case),
) -> ProductItem:
    command = CreateProductCommand(
        title=title,
        description=description,
        price_usd=price_usd,
        category=category,
        image=await _read_upload(image),
    )
    product = await use_case.execute(session, command)
    return _product_item(to_listings([product], session.currency, settings.bcv_rate)[0])


@router.post(
    "/seller/products/description",
    response_model=DescriptionResponse,
    responses={**FORBIDDEN, 422: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
    tags=["seller"],
    summary="Draft a product description with AI",
)
@limiter.limit(settings.rate_limit_heavy)
async def generate_description(
    request: Request,
    body: DescriptionRequest,
    session: SessionContext = Depends(get_current_session),
    use_case: GenerateDescriptionUseCase = Depends(get_generate_description_use_case),
) -> DescriptionResponse:
    """Return a short sales description. Provider failures yield a fallback text."""
    text = await use_case.execute(
        session, GenerateDescriptionQuery(title=body.title, category=body.category)
    )
    return DescriptionResponse(description=text)


@router.get(
    "/seller/orders",
    response_model=OrderListResponse,
    responses=FORBIDDEN,
    tags=["seller"],
    summary="Orders received",
    description="Orders addressed to the seller, newest first, with buyer contact.",
)
async def list_seller_orders(
    session: SessionContext = Depends(get_current_session),
    use_case: ListSellerOrdersUseCase = Depends(get_list_seller_orders_use_case),
) -> OrderListResponse:
    orders = await use_case.execute(session)
    return OrderListResponse(orders=[_order_item(o) for o in orders])
