"""
Bazar: marketplace with manual payment-proof checkout.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - marketplace: Catalog, cart, checkout, order histories, accounts.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, session state, orchestration.
    - infrastructure: Adapters (Supabase, Gemini) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging, retry).
"""
