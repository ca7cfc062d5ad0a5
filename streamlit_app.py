"""
Bazar Streamlit storefront
Venezuelan buyer/seller marketplace

Connects to the FastAPI backend at /api/v1/*
"""

import os

import pandas as pd
import requests
import streamlit as st

# ── Configuration ─────────────────────────────────────────────────────
API_BASE = os.getenv("BAZAR_API_URL", "http://localhost:8000/api/v1")

PAGO_MOVIL = {
    "Banco": "Venezuela (0102)",
    "Teléfono": "0412-123-4567",
    "CI": "V-12345678",
}

st.set_page_config(
    page_title="Bazar · Mercado",
    page_icon="🛍️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .block-container { padding-top: 1rem; }
    .price-tag { color: #4f46e5; font-weight: 700; font-size: 1.1rem; }
    .status-pending { background: #fef3c7; color: #92400e;
        padding: 2px 10px; border-radius: 999px; font-size: 0.8rem; }
    .status-completed { background: #d1fae5; color: #065f46;
        padding: 2px 10px; border-radius: 999px; font-size: 0.8rem; }
    .status-cancelled { background: #fee2e2; color: #991b1b;
        padding: 2px 10px; border-radius: 999px; font-size: 0.8rem; }
</style>
""", unsafe_allow_html=True)


# ── Session state ─────────────────────────────────────────────────────

for key, default in {"token": None, "profile": None, "flash": None}.items():
    if key not in st.session_state:
        st.session_state[key] = default


# ── Helpers ───────────────────────────────────────────────────────────

def _headers() -> dict:
    token = st.session_state.get("token")
    return {"Authorization": f"Bearer {token}"} if token else {}


def _call(method: str, endpoint: str, timeout: int = 30, **kwargs):
    """Send a request to the backend. Errors come back as {"_error": ...}."""
    try:
        r = requests.request(
            method, f"{API_BASE}{endpoint}", headers=_headers(), timeout=timeout, **kwargs
        )
        if r.status_code == 401 and st.session_state.get("token"):
            st.session_state.token = None
            st.session_state.profile = None
        r.raise_for_status()
        return r.json() if r.content else {}
    except requests.exceptions.ConnectionError:
        return {"_error": "No se pudo conectar con el servidor. ¿Está corriendo la API?"}
    except requests.exceptions.HTTPError as e:
        try:
            body = e.response.json()
            message = body.get("detail") or body.get("error") or e.response.text[:300]
        except ValueError:
            message = e.response.text[:300]
        return {"_error": message, "_status": e.response.status_code}
    except requests.exceptions.RequestException as e:
        return {"_error": str(e)}


def api_get(endpoint: str, params: dict = None, timeout: int = 30):
    """GET request to backend."""
    return _call("GET", endpoint, timeout=timeout, params=params)


def api_post(endpoint: str, data: dict = None, timeout: int = 60):
    """POST JSON to backend."""
    return _call("POST", endpoint, timeout=timeout, json=data)


def api_post_form(endpoint: str, fields: dict, files: dict = None, timeout: int = 60):
    """POST a multipart form (with optional files) to backend."""
    return _call("POST", endpoint, timeout=timeout, data=fields, files=files or None)


def api_delete(endpoint: str, timeout: int = 30):
    """DELETE request to backend."""
    return _call("DELETE", endpoint, timeout=timeout)


def show_error(result):
    """Display error from API response if present."""
    if isinstance(result, dict) and "_error" in result:
        st.error(f"⚠️ {result['_error']}")
        return True
    return False


def flash(message: str):
    """Show a message after the next rerun."""
    st.session_state.flash = message


def status_badge(status: str) -> str:
    return f'<span class="status-{status}">{status}</span>'


def upload_tuple(uploaded):
    """Turn a Streamlit upload into a requests file tuple."""
    if uploaded is None:
        return None
    return (uploaded.name, uploaded.getvalue(), uploaded.type or "application/octet-stream")


def signed_in(result: dict):
    st.session_state.token = result.get("access_token")
    st.session_state.profile = result.get("profile")


# ══════════════════════════════════════════════════════════════════════
# AUTH
# ══════════════════════════════════════════════════════════════════════

def render_auth():
    st.title("🛍️ Bazar")
    st.caption("Compra y vende en Venezuela. Paga con Pago Móvil.")

    tab_login, tab_register = st.tabs(["Iniciar sesión", "Registrarse"])

    with tab_login:
        with st.form("login"):
            email = st.text_input("Correo")
            password = st.text_input("Contraseña", type="password")
            submitted = st.form_submit_button("Entrar", type="primary")
        if submitted:
            with st.spinner("Iniciando sesión..."):
                result = api_post("/auth/sign-in", {"email": email, "password": password})
            if not show_error(result):
                signed_in(result)
                st.rerun()

        if st.button("¿Olvidaste tu contraseña?"):
            result = api_post("/auth/password-reset", {"email": email})
            if not show_error(result):
                st.success(result.get("message"))

    with tab_register:
        role_label = st.radio("Quiero", ["Comprar", "Vender"], horizontal=True)
        role = "seller" if role_label == "Vender" else "buyer"
        with st.form("register"):
            full_name = st.text_input("Nombre completo")
            reg_email = st.text_input("Correo", key="reg_email")
            reg_password = st.text_input("Contraseña", type="password", key="reg_password")
            company_name = None
            logo = None
            if role == "seller":
                company_name = st.text_input("Nombre de la empresa")
                logo = st.file_uploader("Logo", type=["png", "jpg", "jpeg", "webp"])
            submitted = st.form_submit_button("Crear cuenta", type="primary")
        if submitted:
            fields = {
                "email": reg_email,
                "password": reg_password,
                "role": role,
                "full_name": full_name,
            }
            if company_name:
                fields["company_name"] = company_name
            files = {"logo": upload_tuple(logo)} if logo else None
            with st.spinner("Creando cuenta..."):
                result = api_post_form("/auth/register", fields, files)
            if not show_error(result):
                st.success(result.get("message"))
                if result.get("access_token"):
                    signed_in(result)
                    st.rerun()


# ══════════════════════════════════════════════════════════════════════
# BUYER
# ══════════════════════════════════════════════════════════════════════

def render_catalog():
    st.title("🛒 Catálogo")

    cats = api_get("/catalog/categories")
    if show_error(cats):
        return
    options = [cats["all_label"]] + cats["categories"]
    category = st.radio("Categoría", options, horizontal=True, label_visibility="collapsed")

    with st.spinner("Cargando productos..."):
        result = api_get("/catalog/products", params={"category": category})
    if show_error(result):
        return

    products = result.get("products", [])
    if not products:
        st.info("No hay productos en esta categoría.")
        return

    cols = st.columns(4)
    for i, product in enumerate(products):
        with cols[i % 4]:
            with st.container(border=True):
                st.image(product["image_url"], use_container_width=True)
                st.markdown(f"**{product['title']}**")
                st.caption(product["category"])
                st.write(product["description"][:120])
                st.markdown(
                    f'<span class="price-tag">{product["price_display"]}</span>',
                    unsafe_allow_html=True,
                )
                if st.button("Agregar", key=f"add_{product['id']}_{i}"):
                    added = api_post("/cart/items", {"product_id": product["id"]})
                    if not show_error(added):
                        flash(f"{product['title']} agregado al carrito.")
                        st.rerun()


def render_cart():
    st.title("🧺 Tu Carrito")

    cart = api_get("/cart")
    if show_error(cart):
        return

    if not cart["items"]:
        st.info("Tu carrito está vacío")
        return

    for i, item in enumerate(cart["items"]):
        c1, c2, c3 = st.columns([1, 4, 1])
        with c1:
            st.image(item["image_url"], width=64)
        with c2:
            st.markdown(f"**{item['title']}**  \n{item['price_display']}")
        with c3:
            if st.button("Eliminar", key=f"rm_{item['id']}_{i}"):
                show_error(api_delete(f"/cart/items/{item['id']}"))
                st.rerun()

    st.metric("Subtotal", cart["subtotal_display"])
    if st.button("Vaciar carrito"):
        show_error(api_delete("/cart"))
        st.rerun()

    st.divider()
    st.subheader("Finalizar Compra")

    delivery = st.session_state.get("want_delivery", False)
    quote = api_get("/cart/quote", params={"delivery": str(delivery).lower()})
    if show_error(quote):
        return
    st.checkbox(
        f"Quiero servicio de Delivery (+{quote['delivery_fee_display']} por vendedor)",
        key="want_delivery",
    )

    with st.container(border=True):
        st.markdown("**Datos Pago Móvil**")
        for label, value in PAGO_MOVIL.items():
            st.markdown(f"{label}: `{value}`")
        st.markdown(f"**Monto a pagar: {quote['total_ves_display']}**")
        if quote["seller_count"] > 1:
            st.caption(f"Se crearán {quote['seller_count']} pedidos, uno por vendedor.")

    with st.form("checkout"):
        payment_ref = st.text_input("Últimos 4 dígitos de Referencia", max_chars=4, placeholder="0000")
        proof = st.file_uploader("Capture de Pago", type=["png", "jpg", "jpeg", "webp"])
        submitted = st.form_submit_button("Confirmar Pago", type="primary")

    if submitted:
        if not (payment_ref.isdigit() and len(payment_ref) == 4):
            st.error("La referencia debe tener 4 dígitos.")
            return
        if proof is None:
            st.error("Sube el capture de pago.")
            return
        with st.spinner("Procesando compra..."):
            result = api_post_form(
                "/checkout",
                {"payment_ref": payment_ref, "delivery": str(delivery).lower()},
                {"proof": upload_tuple(proof)},
            )
        if not show_error(result):
            flash(result["message"])
            st.rerun()


def render_history():
    st.title("📦 Mis Compras")

    result = api_get("/orders/mine")
    if show_error(result):
        return
    orders = result.get("orders", [])
    if not orders:
        st.info("Aún no tienes compras.")
        return

    for order in orders:
        with st.container(border=True):
            c1, c2 = st.columns([3, 1])
            with c1:
                st.markdown(f"**Ref: {order['payment_ref_last4']}** · Total: ${float(order['total_amount_usd']):.2f}")
                st.markdown("\n".join(f"- {line['title']}" for line in order["lines"]))
            with c2:
                st.markdown(status_badge(order["status"]), unsafe_allow_html=True)
                if order["delivery_needed"]:
                    st.caption("Con delivery")


# ══════════════════════════════════════════════════════════════════════
# SELLER
# ══════════════════════════════════════════════════════════════════════

def render_new_product():
    st.title("➕ Publicar Producto")

    cats = api_get("/catalog/categories")
    if show_error(cats):
        return

    if "desc_draft" not in st.session_state:
        st.session_state.desc_draft = ""

    title = st.text_input("Nombre del producto")
    category = st.selectbox("Categoría", cats["categories"])

    if st.button("✨ Generar descripción con IA"):
        with st.spinner("Escribiendo..."):
            result = api_post(
                "/seller/products/description", {"title": title, "category": category}
            )
        if not show_error(result):
            st.session_state.desc_draft = result["description"]

    with st.form("new_product"):
        description = st.text_area("Descripción", value=st.session_state.desc_draft, height=120)
        price = st.number_input("Precio (USD)", min_value=0.0, step=0.5, format="%.2f")
        image = st.file_uploader("Imagen", type=["png", "jpg", "jpeg", "webp"])
        submitted = st.form_submit_button("Publicar", type="primary")

    if submitted:
        files = {"image": upload_tuple(image)} if image else None
        result = api_post_form(
            "/seller/products",
            {
                "title": title,
                "description": description,
                "price_usd": f"{price:.2f}",
                "category": category,
            },
            files,
        )
        if not show_error(result):
            st.session_state.desc_draft = ""
            flash(f"Producto publicado: {result['title']}")
            st.rerun()


def render_inventory():
    st.title("🏷️ Mis Productos")

    result = api_get("/seller/products")
    if show_error(result):
        return
    products = result.get("products", [])
    if not products:
        st.info("Aún no has publicado productos.")
        return

    df = pd.DataFrame(products)
    st.dataframe(
        df[["title", "category", "price_display", "created_at"]].rename(
            columns={
                "title": "Producto",
                "category": "Categoría",
                "price_display": "Precio",
                "created_at": "Publicado",
            }
        ),
        use_container_width=True,
        hide_index=True,
    )


def render_received_orders():
    st.title("📥 Pedidos Recibidos")

    result = api_get("/seller/orders")
    if show_error(result):
        return
    orders = result.get("orders", [])
    if not orders:
        st.info("Aún no has recibido pedidos.")
        return

    rows = [
        {
            "Fecha": o.get("created_at"),
            "Comprador": (o.get("buyer") or {}).get("full_name", ""),
            "Correo": (o.get("buyer") or {}).get("email", ""),
            "Productos": ", ".join(line["title"] for line in o["lines"]),
            "Total USD": float(o["total_amount_usd"]),
            "Ref": o["payment_ref_last4"],
            "Delivery": "Sí" if o["delivery_needed"] else "No",
            "Estado": o["status"],
            "Comprobante": o.get("payment_proof_url") or "",
        }
        for o in orders
    ]
    st.dataframe(
        pd.DataFrame(rows),
        use_container_width=True,
        hide_index=True,
        column_config={"Comprobante": st.column_config.LinkColumn("Comprobante")},
    )


# ══════════════════════════════════════════════════════════════════════
# LAYOUT
# ══════════════════════════════════════════════════════════════════════

if not st.session_state.token:
    render_auth()
    st.stop()

session = api_get("/session")
if show_error(session):
    if not st.session_state.token:
        st.rerun()
    st.stop()

profile = session["profile"]
is_seller = profile["role"] == "seller"

with st.sidebar:
    if profile.get("logo_url"):
        st.image(profile["logo_url"], width=64)
    st.title("Bazar")
    st.caption(profile.get("company_name") or profile["full_name"])
    st.divider()

    if is_seller:
        pages = {
            "➕ Publicar": render_new_product,
            "🏷️ Mis Productos": render_inventory,
            "📥 Pedidos": render_received_orders,
        }
    else:
        pages = {
            "🛒 Catálogo": render_catalog,
            f"🧺 Carrito ({session['cart_count']})": render_cart,
            "📦 Mis Compras": render_history,
        }
    page = st.radio("Navegar", list(pages), label_visibility="collapsed")

    st.divider()
    other = "VES" if session["currency"] == "USD" else "USD"
    if st.button(f"Ver precios en {other}"):
        show_error(api_post("/session/currency/toggle"))
        st.rerun()

    if st.button("Cerrar sesión"):
        api_post("/auth/sign-out")
        st.session_state.token = None
        st.session_state.profile = None
        st.rerun()

    health = api_get("/health")
    if show_error(health):
        st.warning("API fuera de línea")
    else:
        st.caption(f"API v{health.get('version', '?')}")

if st.session_state.flash:
    st.success(st.session_state.flash)
    st.session_state.flash = None

pages[page]()
