import pytest
from fastapi.testclient import TestClient

from kiosk.config import Settings
from kiosk.database import Database
from kiosk.main import create_app
from kiosk.services.crm import CrmClient


class FakePhotoStorage:
    """업로드/서명 동작을 흉내내는 테스트용 저장소"""

    def __init__(self):
        self.uploads = []
        self.fail_upload = False
        self.fail_sign = False

    def upload_visitor_photo(self, data_url: str) -> str:
        if self.fail_upload:
            raise RuntimeError("bucket unreachable")
        key = f"visits/2026-01-01/photo-{len(self.uploads) + 1}.jpg"
        self.uploads.append((key, data_url))
        return key

    def generate_presigned_url(self, key: str) -> str:
        if self.fail_sign:
            raise RuntimeError("signing failed")
        return f"https://bucket.test/{key}?signature=abc"


class RecordingCrmClient(CrmClient):
    """전송된 페이로드만 모아두는 CRM 클라이언트"""

    def __init__(self):
        super().__init__(session_factory=None)
        self.payloads = []

    def send_visit(self, payload):
        self.payloads.append(payload)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        admin_password="letmein",
        admin_session_secret="test-session-secret",
        log_level="WARNING",
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def photo_storage():
    return FakePhotoStorage()


@pytest.fixture
def crm_client():
    return RecordingCrmClient()


@pytest.fixture
def client(settings, database, photo_storage, crm_client):
    app = create_app(settings, database=database, photo_storage=photo_storage, crm_client=crm_client)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    resp = client.post("/api/admin/login", json={"password": "letmein"})
    assert resp.status_code == 200
    return client
