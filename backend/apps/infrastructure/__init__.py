# apps/infrastructure/__init__.py
"""
Infrastructure Layer - Cross-Cutting Concerns

This layer handles:
- Configuration management
- Rate limit tables
- Caching
"""

__version__ = "1.0.0"
