"""
Tests for project labels and labels on tasks.
"""
import pytest

from app.models.project import ProjectRole
from tests.conftest import API


@pytest.fixture
def make_label(client, owner_headers, project):
    """Factory: create a label in the project as the owner."""
    def _make_label(name, color="#EF4444", project_id=None) -> dict:
        response = client.post(
            f"{API}/projects/{project_id or project['id']}/labels",
            json={"name": name, "color": color},
            headers=owner_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_label


@pytest.fixture
def other_project(client, owner_headers) -> dict:
    response = client.post(f"{API}/projects", json={"name": "Other"}, headers=owner_headers)
    return response.json()


class TestLabels:
    def test_create_and_list_labels(self, client, owner_headers, project, make_label):
        make_label("bug")
        make_label("backend", color="#3B82F6")

        response = client.get(f"{API}/projects/{project['id']}/labels", headers=owner_headers)

        assert response.status_code == 200
        assert [label["name"] for label in response.json()] == ["backend", "bug"]
        assert response.json()[0]["project_id"] == project["id"]

    def test_default_color(self, client, owner_headers, project):
        response = client.post(f"{API}/projects/{project['id']}/labels", json={"name": "docs"}, headers=owner_headers)

        assert response.status_code == 201
        assert response.json()["color"] == "#6B7280"

    def test_duplicate_name_in_project(self, client, owner_headers, project, make_label):
        make_label("bug")

        response = client.post(f"{API}/projects/{project['id']}/labels", json={"name": "bug"}, headers=owner_headers)

        assert response.status_code == 409

    def test_same_name_in_other_project(self, make_label, other_project):
        make_label("bug")

        assert make_label("bug", project_id=other_project["id"])["project_id"] == other_project["id"]

    def test_rename_to_taken_name(self, client, owner_headers, project, make_label):
        make_label("bug")
        feature = make_label("feature")

        response = client.put(
            f"{API}/projects/{project['id']}/labels/{feature['id']}",
            json={"name": "bug"},
            headers=owner_headers,
        )

        assert response.status_code == 409

    def test_update_label(self, client, owner_headers, project, make_label):
        label = make_label("bug")

        response = client.put(
            f"{API}/projects/{project['id']}/labels/{label['id']}",
            json={"name": "defect", "color": "#000000"},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "defect"
        assert response.json()["color"] == "#000000"

    def test_label_of_other_project_is_not_found(self, client, owner_headers, project, make_label, other_project):
        label = make_label("bug", project_id=other_project["id"])

        response = client.put(
            f"{API}/projects/{project['id']}/labels/{label['id']}",
            json={"name": "stolen"},
            headers=owner_headers,
        )

        assert response.status_code == 404

    def test_member_can_read_but_not_manage(self, client, project, make_user, add_member, login, make_label):
        member = make_user()
        add_member(project["id"], member, ProjectRole.MEMBER)
        headers = login(member)
        label = make_label("bug")

        read = client.get(f"{API}/projects/{project['id']}/labels", headers=headers)
        create = client.post(f"{API}/projects/{project['id']}/labels", json={"name": "x"}, headers=headers)
        delete = client.delete(f"{API}/projects/{project['id']}/labels/{label['id']}", headers=headers)

        assert read.status_code == 200
        assert create.status_code == 403
        assert create.json() == {"detail": "insufficient project role: ADMIN required"}
        assert delete.status_code == 403


class TestTaskLabels:
    def test_create_task_with_labels(self, client, owner_headers, board, make_label):
        bug = make_label("bug")

        response = client.post(
            f"{API}/lists/{board['To Do']['id']}/tasks",
            json={"title": "Fix login", "label_ids": [bug["id"], bug["id"]]},
            headers=owner_headers,
        )

        assert response.status_code == 201
        assert [label["id"] for label in response.json()["labels"]] == [bug["id"]]

    def test_task_without_labels(self, create_task, board):
        assert create_task(board["To Do"]["id"])["labels"] == []

    def test_label_from_other_project_is_rejected(self, client, owner_headers, board, make_label, other_project):
        foreign = make_label("bug", project_id=other_project["id"])

        response = client.post(
            f"{API}/lists/{board['To Do']['id']}/tasks",
            json={"title": "Fix login", "label_ids": [foreign["id"]]},
            headers=owner_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "labels must belong to the project"}

    def test_update_replaces_and_clears_labels(self, client, owner_headers, board, create_task, make_label):
        bug = make_label("bug")
        ui = make_label("ui")
        task = create_task(board["To Do"]["id"])

        replaced = client.put(
            f"{API}/tasks/{task['id']}",
            json={"label_ids": [ui["id"], bug["id"]]},
            headers=owner_headers,
        )
        untouched = client.put(f"{API}/tasks/{task['id']}", json={"title": "Renamed"}, headers=owner_headers)
        cleared = client.put(f"{API}/tasks/{task['id']}", json={"label_ids": []}, headers=owner_headers)

        assert [label["name"] for label in replaced.json()["labels"]] == ["bug", "ui"]
        assert len(untouched.json()["labels"]) == 2
        assert cleared.json()["labels"] == []

    def test_deleted_label_is_removed_from_tasks(self, client, owner_headers, project, board, make_label):
        bug = make_label("bug")
        task = client.post(
            f"{API}/lists/{board['To Do']['id']}/tasks",
            json={"title": "Fix login", "label_ids": [bug["id"]]},
            headers=owner_headers,
        ).json()

        response = client.delete(f"{API}/projects/{project['id']}/labels/{bug['id']}", headers=owner_headers)

        assert response.status_code == 204
        assert client.get(f"{API}/tasks/{task['id']}", headers=owner_headers).json()["labels"] == []

    def test_board_shows_task_labels(self, client, owner_headers, project, board, make_label):
        bug = make_label("bug")
        client.post(
            f"{API}/lists/{board['To Do']['id']}/tasks",
            json={"title": "Fix login", "label_ids": [bug["id"]]},
            headers=owner_headers,
        )

        lists = client.get(f"{API}/projects/{project['id']}/lists", headers=owner_headers).json()

        assert lists[0]["tasks"][0]["labels"][0]["name"] == "bug"
