"""
Interfaces layer package.

HTTP routers and request/response schemas. Routes delegate to use cases.
"""
