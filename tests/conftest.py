"""
Pytest configuration and fixtures for the TaskFlow API tests.
"""
import pytest
from faker import Faker
from fastapi.testclient import TestClient

from app.database import Database
from app.main import create_app
from app.models.project import ProjectMember, ProjectRole
from app.models.user import User
from app.services.auth import get_password_hash, get_current_timestamp

# Initialize Faker for test data generation
fake = Faker()

TEST_PASSWORD = "Secret123!"
API = "/api/v1"


@pytest.fixture
def database():
    """In-memory database, fresh for every test."""
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture
def db_session(database):
    with database.session() as session:
        yield session


@pytest.fixture
def client(database) -> TestClient:
    """Test client bound to the in-memory database."""
    return TestClient(create_app(database))


def fake_email() -> str:
    return f"{fake.unique.user_name()}@taskflow.io"


@pytest.fixture
def make_user(database):
    """Factory: create a user directly in the database."""
    def _make_user(email=None, name=None, password=TEST_PASSWORD) -> User:
        with database.session() as session:
            user = User(
                name=name or fake.name(),
                email=email or fake_email(),
                password_hash=get_password_hash(password),
                created_at=get_current_timestamp(),
            )
            session.add(user)
            session.commit()
            return user

    return _make_user


@pytest.fixture
def login(client):
    """Factory: log in and return auth headers for the access token."""
    def _login(user: User, password=TEST_PASSWORD) -> dict:
        response = client.post(f"{API}/auth/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture
def add_member(database):
    """Factory: add a user to a project with the given role."""
    def _add_member(project_id: str, user: User, role: ProjectRole = ProjectRole.MEMBER) -> None:
        with database.session() as session:
            session.add(
                ProjectMember(
                    user_id=user.id,
                    project_id=project_id,
                    role=role.value,
                    created_at=get_current_timestamp(),
                )
            )
            session.commit()

    return _add_member


@pytest.fixture
def owner(make_user):
    return make_user()


@pytest.fixture
def owner_headers(owner, login):
    return login(owner)


@pytest.fixture
def project(client, owner_headers) -> dict:
    """Project created through the API: default lists plus the archive."""
    response = client.post(f"{API}/projects", json={"name": "Board"}, headers=owner_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def board(client, owner_headers, project) -> dict:
    """Lists of the project keyed by name (archive included)."""
    response = client.get(
        f"{API}/projects/{project['id']}/lists",
        params={"include_archive": True},
        headers=owner_headers,
    )
    assert response.status_code == 200, response.text
    return {item["name"]: item for item in response.json()}


@pytest.fixture
def create_task(client, owner_headers):
    """Factory: create a task in a list as the project owner."""
    def _create_task(list_id: str, title=None, headers=None) -> dict:
        response = client.post(
            f"{API}/lists/{list_id}/tasks",
            json={"title": title or fake.sentence(nb_words=3)},
            headers=headers or owner_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create_task
