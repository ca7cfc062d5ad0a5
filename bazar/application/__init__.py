"""
Application layer package.

Use cases orchestrate domain logic through ports.
No framework imports and no direct IO.
"""
