"""
Projects Public Module
======================

Public listing of approved projects with search and module filter,
plus a JSON feed for embedding on other sites.
"""

from .routes import projects_public_bp

__all__ = ['projects_public_bp']
