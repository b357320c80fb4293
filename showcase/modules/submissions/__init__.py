"""
Submissions Module
==================

Public upload form for student projects. Every submission starts pending
and waits for an admin in the moderation queue.
"""

from flask import Blueprint

submissions_bp = Blueprint(
    'submissions',
    __name__,
    template_folder='templates'
)

from . import routes

__all__ = ['submissions_bp']
