"""
Persistence layer tests
=======================

ShowcaseDatabase against a real SQLite file in a temp directory.
"""

import os
import sqlite3
from datetime import timedelta

import pytest
from werkzeug.security import check_password_hash

from showcase.core.database import ShowcaseDatabase, ProjectStatus, ConfigurationError

from conftest import add_project


@pytest.fixture
def store(tmp_dir):
    database = ShowcaseDatabase(os.path.join(tmp_dir, "nested", "projects.db"))
    database.init("admin", "pw")
    return database


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------

def test_init_creates_directory_and_tables(store):
    assert os.path.isfile(store.db_path)
    conn = sqlite3.connect(store.db_path)
    try:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    finally:
        conn.close()
    assert {"projects", "admins", "admin_sessions"} <= tables


def test_init_is_idempotent_and_seeds_one_admin(store):
    store.init("admin", "another-password")

    conn = sqlite3.connect(store.db_path)
    try:
        count = conn.execute("SELECT COUNT(*) FROM admins").fetchone()[0]
    finally:
        conn.close()
    assert count == 1

    admin = store.get_admin_by_username("admin")
    # The first seeded password is kept
    assert check_password_hash(admin["password_hash"], "pw")
    assert admin["password_hash"] != "pw"


@pytest.mark.parametrize("username,password", [(None, "pw"), ("admin", None), ("", ""), ("admin", "")])
def test_init_requires_admin_credentials(tmp_dir, username, password):
    database = ShowcaseDatabase(os.path.join(tmp_dir, "projects.db"))
    with pytest.raises(ConfigurationError):
        database.init(username, password)


def test_get_admin_by_username_missing(store):
    assert store.get_admin_by_username("nobody") is None


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def test_add_project_is_pending_with_ordered_screenshots(store):
    project_id = store.add_project({
        "project_name": "Chat App",
        "project_link": None,
        "student_name": "A",
        "teacher_name": "B",
        "module_name": "Web101",
        "screenshots": ["3.png", "1.png", "2.png"],
        "status": "approved",
    })

    project = store.get_project(project_id)
    assert project["status"] == "pending"
    assert project["screenshots"] == ["3.png", "1.png", "2.png"]
    assert project["project_link"] is None
    assert project["created_at"]


def test_approved_only_never_returns_other_statuses(store):
    ids = [add_project(store, name=f"P{i}") for i in range(3)]
    store.update_project_status(ids[0], ProjectStatus.APPROVED)
    store.update_project_status(ids[1], ProjectStatus.REJECTED)

    approved = store.get_projects(approved_only=True)
    assert [p["id"] for p in approved] == [ids[0]]
    assert all(p["status"] == "approved" for p in approved)

    everything = store.get_projects(approved_only=False)
    assert len(everything) == 3


def test_get_projects_search_is_case_insensitive_over_names(store):
    chat = add_project(store, name="Chat App", teacher="Ms Brown", student="Alice")
    game = add_project(store, name="Snake Game", teacher="Mr Green", student="Bob")
    for project_id in (chat, game):
        store.update_project_status(project_id, "approved")

    assert [p["id"] for p in store.get_projects(search="chat")] == [chat]
    assert [p["id"] for p in store.get_projects(search="GREEN")] == [game]
    assert [p["id"] for p in store.get_projects(search="alice")] == [chat]
    assert store.get_projects(search="nothing-matches") == []


def test_get_projects_search_folds_non_ascii_letters(store):
    project_id = add_project(store, name="Projet de l'école", teacher="Mme Ørsted")
    store.update_project_status(project_id, "approved")

    assert [p["id"] for p in store.get_projects(search="ÉCOLE")] == [project_id]
    assert [p["id"] for p in store.get_projects(search="ørsted")] == [project_id]


def test_get_projects_search_treats_wildcards_literally(store):
    project_id = add_project(store, name="Chat App")
    store.update_project_status(project_id, "approved")

    assert store.get_projects(search="%") == []
    assert store.get_projects(search="_") == []


def test_get_projects_module_filter_is_exact(store):
    web = add_project(store, module="Web101")
    add_project(store, module="Web1010")
    store.update_project_status(web, "approved")

    results = store.get_projects(module_filter="Web101", approved_only=False)
    assert [p["id"] for p in results] == [web]


def test_listings_are_newest_first(store):
    ids = [add_project(store, name=f"P{i}") for i in range(3)]

    assert [p["id"] for p in store.get_pending_projects()] == list(reversed(ids))
    assert [p["id"] for p in store.get_projects(approved_only=False)] == list(reversed(ids))


def test_get_all_projects_orders_by_status_then_newest(store):
    p1, p2, p3, p4 = [add_project(store, name=f"P{i}") for i in range(4)]
    store.update_project_status(p1, ProjectStatus.APPROVED)
    store.update_project_status(p2, ProjectStatus.REJECTED)

    assert [p["id"] for p in store.get_all_projects()] == [p4, p3, p1, p2]


def test_get_modules_lists_approved_modules_only(store):
    a = add_project(store, module="Web101")
    b = add_project(store, module="Data200")
    add_project(store, module="Hidden300")
    store.update_project_status(a, "approved")
    store.update_project_status(b, "approved")

    assert store.get_modules() == ["Data200", "Web101"]


def test_count_projects(store):
    add_project(store)
    approved = add_project(store)
    store.update_project_status(approved, "approved")

    assert store.count_projects() == 2
    assert store.count_projects(ProjectStatus.PENDING) == 1
    assert store.count_projects("approved") == 1


def test_update_status_on_missing_project_returns_zero(store):
    assert store.update_project_status(9999, ProjectStatus.APPROVED) == 0


def test_update_status_rejects_unknown_values(store):
    project_id = add_project(store)
    with pytest.raises(ValueError):
        store.update_project_status(project_id, "archived")
    assert store.get_project(project_id)["status"] == "pending"


def test_status_column_rejects_invalid_values(store):
    conn = sqlite3.connect(store.db_path)
    try:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO projects (project_name, module_name, status) VALUES ('x', 'y', 'archived')"
            )
    finally:
        conn.close()


def test_delete_project_returns_affected_count(store):
    project_id = add_project(store)

    assert store.delete_project(project_id) == 1
    assert store.get_project(project_id) is None
    assert store.delete_project(project_id) == 0


def test_malformed_screenshots_decode_to_empty_list(store):
    conn = sqlite3.connect(store.db_path)
    try:
        conn.execute(
            "INSERT INTO projects (project_name, module_name, screenshots) VALUES ('x', 'y', 'not json')"
        )
        conn.commit()
    finally:
        conn.close()

    assert store.get_pending_projects()[0]["screenshots"] == []


# ---------------------------------------------------------------------------
# Admin sessions
# ---------------------------------------------------------------------------

def _admin_id(store):
    return store.get_admin_by_username("admin")["id"]


def test_session_lifecycle(store):
    token = store.create_session(_admin_id(store), timedelta(hours=24))
    assert len(token) >= 32

    session = store.get_session(token)
    assert session["username"] == "admin"
    assert session["admin_id"] == _admin_id(store)
    assert session["created_at"] < session["expires_at"]

    assert store.delete_session(token) == 1
    assert store.get_session(token) is None
    assert store.delete_session(token) == 0


def test_tokens_are_unique(store):
    admin_id = _admin_id(store)
    tokens = {store.create_session(admin_id, timedelta(hours=1)) for _ in range(5)}
    assert len(tokens) == 5


def test_expired_session_is_not_returned_or_extended(store):
    token = store.create_session(_admin_id(store), timedelta(seconds=-1))

    assert store.get_session(token) is None
    assert store.touch_session(token, timedelta(hours=24)) == 0
    assert store.get_session(token) is None


def test_touch_extends_live_session(store):
    token = store.create_session(_admin_id(store), timedelta(minutes=5))
    before = store.get_session(token)["expires_at"]

    assert store.touch_session(token, timedelta(hours=24)) == 1
    assert store.get_session(token)["expires_at"] > before


def test_unknown_token_is_not_a_session(store):
    assert store.get_session("not-a-token") is None


def test_expired_sessions_are_purged_on_init(store):
    admin_id = _admin_id(store)
    live = store.create_session(admin_id, timedelta(hours=1))
    store.create_session(admin_id, timedelta(seconds=-1))

    store.init("admin", "pw")

    conn = sqlite3.connect(store.db_path)
    try:
        tokens = [row[0] for row in conn.execute("SELECT token FROM admin_sessions")]
    finally:
        conn.close()
    assert tokens == [live]
