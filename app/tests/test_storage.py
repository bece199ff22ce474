from datetime import timedelta
from types import SimpleNamespace

from app.config import settings
from app.main import app
from app.services.auth_service import create_access_token
from app.services.storage import BUCKET_FILE_SIZE_LIMIT, get_supabase_client


def _headers(user):
    token = create_access_token(user.email, user.id, user.role.value, timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


class FakeStorage:
    def __init__(self, names, fail_create=False):
        self.buckets = [SimpleNamespace(name=name, id=name) for name in names]
        self.created = []
        self.fail_create = fail_create

    def list_buckets(self):
        return self.buckets

    def create_bucket(self, id, options=None):
        if self.fail_create:
            raise RuntimeError("storage unavailable")
        self.created.append((id, options))
        return {"name": id}


def _use_storage(storage):
    app.dependency_overrides[get_supabase_client] = lambda: SimpleNamespace(storage=storage)


def test_creates_missing_bucket(client, admin_user):
    storage = FakeStorage(["avatars"])
    _use_storage(storage)
    r = client.post("/storage/announcements-bucket", headers=_headers(admin_user))
    assert r.status_code == 200, r.text
    assert r.json() == {
        "success": True,
        "message": "Storage bucket initialized successfully",
        "bucketExists": False,
    }
    bucket_id, options = storage.created[0]
    assert bucket_id == "announcements"
    assert options["public"] is True
    assert options["file_size_limit"] == BUCKET_FILE_SIZE_LIMIT == 10485760
    assert "application/pdf" in options["allowed_mime_types"]


def test_existing_bucket_is_left_alone(client, admin_user):
    storage = FakeStorage(["announcements"])
    _use_storage(storage)
    r = client.post("/storage/announcements-bucket", headers=_headers(admin_user))
    assert r.status_code == 200
    assert r.json()["bucketExists"] is True
    assert storage.created == []


def test_create_bucket_failure(client, admin_user):
    _use_storage(FakeStorage([], fail_create=True))
    r = client.post("/storage/announcements-bucket", headers=_headers(admin_user))
    assert r.status_code == 500
    assert r.json()["error_type"] == "upstream_error"


def test_missing_supabase_config(client, admin_user, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_ROLE_KEY", "")
    r = client.post("/storage/announcements-bucket", headers=_headers(admin_user))
    assert r.status_code == 500
    assert r.json()["error_type"] == "config_error"


def test_requires_admin(client, regular_user):
    _use_storage(FakeStorage([]))
    r = client.post("/storage/announcements-bucket", headers=_headers(regular_user))
    assert r.status_code == 403
