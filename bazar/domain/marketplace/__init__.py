"""
Marketplace bounded context: domain layer.

This module contains all domain logic for the marketplace context:
- Catalog and currency display
- Cart aggregation
- Per-seller order drafting
"""
