from fastapi import status

from cloud_ide.models import Folder
from cloud_ide.utils.storage import FOLDER_PLACEHOLDER


class TestCreateFolder:
    """POST /api/v1/folders"""

    def test_create_root_folder(self, client, db_session, create_test_user, auth_headers, storage):
        alice = create_test_user(email="alice@example.com")

        response = client.post(
            "/api/v1/folders", json={"folderName": "webapp"}, headers=auth_headers(alice)
        )

        assert response.status_code == status.HTTP_201_CREATED
        folder = response.json()["folder"]
        assert folder["name"] == "webapp"
        assert folder["owner_id"] == alice.id
        assert folder["parent_id"] is None
        assert folder["path"] == f"{alice.id}/webapp/"
        assert f"{alice.id}/webapp/{FOLDER_PLACEHOLDER}" in storage.objects

    def test_snake_case_body_accepted(self, client, create_test_user, auth_headers):
        alice = create_test_user(email="alice@example.com")

        response = client.post(
            "/api/v1/folders", json={"folder_name": "api"}, headers=auth_headers(alice)
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_subfolder_inherits_owner_path(self, client, project_tree, auth_headers):
        tree = project_tree

        response = client.post(
            "/api/v1/folders",
            json={"folderName": "src", "parentId": tree.f2.id},
            headers=auth_headers(tree.alice),
        )

        folder = response.json()["folder"]
        assert folder["parent_id"] == tree.f2.id
        assert folder["path"] == tree.f2.path + "src/"

    def test_collaborator_subfolder_owned_by_project_owner(self, client, project_tree, auth_headers):
        tree = project_tree

        response = client.post(
            "/api/v1/folders",
            json={"folderName": "bob-notes", "parentId": tree.f2.id},
            headers=auth_headers(tree.bob),
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["folder"]["owner_id"] == tree.alice.id

    def test_collaborator_can_create_directly_under_root(self, client, project_tree, auth_headers):
        tree = project_tree

        response = client.post(
            "/api/v1/folders",
            json={"folderName": "docs", "parentId": tree.f1.id},
            headers=auth_headers(tree.bob),
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_stranger_forbidden(self, client, db_session, project_tree, auth_headers):
        tree = project_tree

        response = client.post(
            "/api/v1/folders",
            json={"folderName": "evil", "parentId": tree.f2.id},
            headers=auth_headers(tree.carol),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"success": False, "message": "Unauthorized access"}
        assert db_session.query(Folder).filter_by(name="evil").count() == 0

    def test_parent_not_found(self, client, create_test_user, auth_headers):
        alice = create_test_user(email="alice@example.com")

        response = client.post(
            "/api/v1/folders",
            json={"folderName": "x", "parentId": 4242},
            headers=auth_headers(alice),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Parent folder not found"

    def test_blank_name_rejected(self, client, create_test_user, auth_headers):
        alice = create_test_user(email="alice@example.com")

        response = client.post(
            "/api/v1/folders", json={"folderName": "  "}, headers=auth_headers(alice)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "FolderName Required"

    def test_slash_in_name_rejected(self, client, db_session, create_test_user, auth_headers, storage):
        alice = create_test_user(email="alice@example.com")

        response = client.post(
            "/api/v1/folders", json={"folderName": "a/b"}, headers=auth_headers(alice)
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Folder name cannot contain '/'"
        assert db_session.query(Folder).count() == 0
        assert storage.objects == {}

    def test_missing_name_rejected(self, client, create_test_user, auth_headers):
        alice = create_test_user(email="alice@example.com")

        response = client.post("/api/v1/folders", json={}, headers=auth_headers(alice))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Invalid request"

    def test_duplicate_sibling_rejected(self, client, project_tree, auth_headers):
        tree = project_tree

        response = client.post(
            "/api/v1/folders",
            json={"folderName": "F2", "parentId": tree.f1.id},
            headers=auth_headers(tree.alice),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Folder name F2 already exists"

    def test_storage_failure_creates_nothing(self, client, db_session, create_test_user, auth_headers, storage):
        alice = create_test_user(email="alice@example.com")
        storage.failing.add("store")

        response = client.post(
            "/api/v1/folders", json={"folderName": "webapp"}, headers=auth_headers(alice)
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert db_session.query(Folder).count() == 0


class TestListFolders:
    def test_lists_own_root_folders_only(self, client, project_tree, make_folder, auth_headers):
        tree = project_tree
        make_folder("Another", tree.alice)
        make_folder("BobOwn", tree.bob)

        response = client.get("/api/v1/folders", headers=auth_headers(tree.alice))

        assert response.status_code == status.HTTP_200_OK
        assert [f["name"] for f in response.json()["folders"]] == ["Another", "F1"]


class TestFolderStructure:
    """GET /api/v1/folders/{id}/structure"""

    def test_owner_gets_full_tree(self, client, project_tree, make_folder, make_file, auth_headers):
        tree = project_tree
        src = make_folder("src", tree.alice, parent=tree.f2)
        make_file("main.py", tree.alice, parent=src)

        response = client.get(f"/api/v1/folders/{tree.f1.id}/structure", headers=auth_headers(tree.alice))

        assert response.status_code == status.HTTP_200_OK
        root = response.json()["structure"]
        assert root["name"] == "F1"
        assert root["type"] == "folder"
        f2 = root["subfolders"][0]
        assert f2["name"] == "F2"
        assert [f["name"] for f in f2["files"]] == ["doc.txt"]
        assert f2["subfolders"][0]["files"][0]["name"] == "main.py"

    def test_collaborator_sees_nested_folder(self, client, project_tree, make_folder, auth_headers):
        tree = project_tree
        make_folder("deeper", tree.alice, parent=tree.f2)

        response = client.get(f"/api/v1/folders/{tree.f2.id}/structure", headers=auth_headers(tree.bob))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["structure"]["subfolders"][0]["name"] == "deeper"

    def test_stranger_forbidden(self, client, project_tree, auth_headers):
        response = client.get(
            f"/api/v1/folders/{project_tree.f1.id}/structure",
            headers=auth_headers(project_tree.carol),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_folder(self, client, project_tree, auth_headers):
        response = client.get("/api/v1/folders/999/structure", headers=auth_headers(project_tree.alice))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Folder not found"
