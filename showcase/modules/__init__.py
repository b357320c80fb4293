"""
Showcase Modules
================

Flask blueprint modules for the public site and the admin area.
"""

__all__ = ['dashboard', 'projects', 'projects_public', 'submissions']
