from fastapi import status

from cloud_ide.models import Collaborator


class TestNotifyCollaborators:
    """POST /api/v1/collaboration/notify"""

    def test_owner_notifies_everyone_but_themselves(
        self, client, db_session, create_test_user, make_folder, make_collaboration,
        auth_headers, mailer,
    ):
        alice = create_test_user(email="alice@example.com")
        bob = create_test_user(email="bob@example.com")
        carol = create_test_user(email="carol@example.com")
        project = make_folder("F1", alice)
        # alice also appears in her own collaborator list
        make_collaboration(project, alice, members=[alice, bob, carol])

        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project.id, "changeMessage": "Refactored main.py"},
            headers=auth_headers(alice),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["notifiedCount"] == 2
        assert data["recipients"] == ["bob@example.com", "carol@example.com"]
        assert data["message"] == "Notifications sent to 2 collaborator(s)"
        assert mailer.notify.call_count == 2
        mailer.notify.assert_any_call(
            "bob@example.com", "alice@example.com", "F1", "Refactored main.py"
        )

    def test_collaborator_notifies_owner_and_others(
        self, client, db_session, project_tree, auth_headers, mailer
    ):
        tree = project_tree
        tree.collaboration.collaborators.append(
            Collaborator(user_id=tree.carol.id, email=tree.carol.email, role="editor")
        )
        db_session.commit()

        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": tree.f1.id, "changeMessage": "Added tests"},
            headers=auth_headers(tree.bob),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["recipients"] == ["alice@example.com", "carol@example.com"]

    def test_pending_invites_are_notified(
        self, client, db_session, create_test_user, make_folder, make_collaboration,
        auth_headers,
    ):
        alice = create_test_user(email="alice@example.com")
        project = make_folder("F1", alice)
        make_collaboration(project, alice, members=["pending@example.com"])

        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project.id, "changeMessage": "hello"},
            headers=auth_headers(alice),
        )

        assert response.json()["recipients"] == ["pending@example.com"]

    def test_delivery_failure_does_not_stop_loop(
        self, client, db_session, create_test_user, make_folder, make_collaboration,
        auth_headers, mailer,
    ):
        alice = create_test_user(email="alice@example.com")
        project = make_folder("F1", alice)
        make_collaboration(project, alice, members=["a@example.com", "b@example.com"])
        mailer.notify.side_effect = [RuntimeError("bounce"), True]

        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project.id, "changeMessage": "hello"},
            headers=auth_headers(alice),
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["notifiedCount"] == 2
        assert mailer.notify.call_count == 2

    def test_email_only_member_is_not_authorised(
        self, client, db_session, create_test_user, make_folder, make_collaboration,
        auth_headers,
    ):
        alice = create_test_user(email="alice@example.com")
        dave = create_test_user(email="dave@example.com")
        project = make_folder("F1", alice)
        # Listed by email but without a linked user id
        make_collaboration(project, alice, members=["dave@example.com"])

        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project.id, "changeMessage": "hello"},
            headers=auth_headers(dave),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_stranger_forbidden(self, client, project_tree, auth_headers, mailer):
        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project_tree.f1.id, "changeMessage": "hello"},
            headers=auth_headers(project_tree.carol),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "You don't have permission to notify collaborators"
        mailer.notify.assert_not_called()

    def test_project_without_collaboration(self, client, create_test_user, make_folder, auth_headers):
        alice = create_test_user(email="alice@example.com")
        project = make_folder("Solo", alice)

        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project.id, "changeMessage": "hello"},
            headers=auth_headers(alice),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "This project is not in collaboration mode"

    def test_blank_message_rejected(self, client, project_tree, auth_headers):
        response = client.post(
            "/api/v1/collaboration/notify",
            json={"projectId": project_tree.f1.id, "changeMessage": "  "},
            headers=auth_headers(project_tree.alice),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
