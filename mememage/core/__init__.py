"""
Core utilities shared across the MemEmage API.

This package hosts:
- configuration helpers (env vars, paths, secrets)
- cross-cutting concerns such as logging, the error taxonomy, the response
  envelope, credential hashing and identity tokens.

Routers and services depend on these primitives instead of reading
os.environ or building responses by hand.
"""
