"""
Shared fixtures for the showcase test suite.
Run with: pytest tests/ -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import io
import os
import shutil
import tempfile

import pytest

from showcase import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "s3cret-pass"

PROJECT_FORM = {
    "projectName": "Chat App",
    "projectLink": "http://x",
    "studentName": "A",
    "teacherName": "B",
    "moduleName": "Web101",
}


def make_config(tmp_dir, **overrides):
    config = {
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "DB_DIR": tmp_dir,
        "SHOWCASE_DB": os.path.join(tmp_dir, "projects.db"),
        "UPLOAD_FOLDER": os.path.join(tmp_dir, "uploads"),
        "ADMIN_USERNAME": ADMIN_USERNAME,
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
    }
    config.update(overrides)
    return config


def screenshots(count=3, ext="png", size=None):
    """Multipart file tuples; file i contains b'img<i>' (or `size` bytes)"""
    files = []
    for i in range(count):
        content = b"x" * size if size is not None else b"img%d" % i
        files.append((io.BytesIO(content), f"shot{i}.{ext}"))
    return files


def submission(files=None, **fields):
    data = dict(PROJECT_FORM)
    data.update(fields)
    data["screenshots"] = screenshots() if files is None else files
    return data


@pytest.fixture
def tmp_dir():
    """Temporary directory for the database and uploads, cleaned up after."""
    d = tempfile.mkdtemp(prefix="showcase-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_dir):
    """Fully initialised app with a seeded admin."""
    return create_app(make_config(tmp_dir))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return app.extensions["showcase"].db


@pytest.fixture
def admin_client(client):
    """Test client with a logged-in admin session."""
    response = client.post("/admin/login", data={
        "username": ADMIN_USERNAME,
        "password": ADMIN_PASSWORD,
    })
    assert response.status_code == 302
    return client


def add_project(db, name="Chat App", module="Web101", student="A", teacher="B"):
    return db.add_project({
        "project_name": name,
        "project_link": "http://x",
        "student_name": student,
        "teacher_name": teacher,
        "module_name": module,
        "screenshots": ["a.png", "b.png", "c.png"],
    })
