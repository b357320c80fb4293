"""
Student Project Showcase
========================

Run with:
    python app.py

Or under a WSGI server:
    gunicorn app:app

Visit:
    http://localhost:3000               - Homepage
    http://localhost:3000/admin/login   - Admin panel
"""

import logging

from showcase import create_app
from showcase.core.config import Config

logging.basicConfig(level=logging.INFO)

app = create_app()


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Student Project Showcase")
    print("=" * 60)
    print(f"Homepage:        http://localhost:{Config.port}")
    print(f"Projects:        http://localhost:{Config.port}/projects")
    print(f"Admin Login:     http://localhost:{Config.port}/admin/login")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True)
