"""
Infrastructure layer package.

Adapters that implement domain ports against external services.
"""
