"""
High-level use cases for the MemEmage API.

Each service module orchestrates repositories/adapters to implement the
business rules (signup, login, create meme, likes, ...). Routers call these
services instead of touching sessions or the compositor directly.
"""
