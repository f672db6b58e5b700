"""
Persistence adapters.

These modules encapsulate how users and memes are stored/retrieved.
Services depend on the repository interface rather than touching sessions.
"""
