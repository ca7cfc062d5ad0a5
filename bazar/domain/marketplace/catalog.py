"""
Catalog constants and storage path conventions.

Uploaded files are namespaced by purpose (logos/, products/, payments/),
by owning identity and by a millisecond timestamp to avoid collisions.
"""

from datetime import datetime, timezone

ALL_CATEGORIES = "Todas"

CATEGORIES = (
    "Electrónica",
    "Ropa y Moda",
    "Hogar y Muebles",
    "Vehículos y Repuestos",
    "Libros y Papelería",
    "Instrumentos Musicales",
    "Alimentos y Bebidas",
    "Deportes y Fitness",
    "Bebés y Juguetes",
    "Herramientas y Construcción",
)


def is_known_category(category: str) -> bool:
    return category in CATEGORIES


def timestamp_ms(now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    return int(now.timestamp() * 1000)


def logo_path(user_id: str, now: datetime | None = None) -> str:
    return f"logos/{user_id}_{timestamp_ms(now)}"


def product_image_path(seller_id: str, now: datetime | None = None) -> str:
    return f"products/{seller_id}/{timestamp_ms(now)}"


def payment_proof_path(buyer_id: str, now: datetime | None = None) -> str:
    return f"payments/{buyer_id}/{timestamp_ms(now)}"
