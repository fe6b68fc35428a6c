"""Collaboration membership: invitations, removal, listing and notifications.

A collaboration belongs to exactly one root folder. Only its owner (or the
folder's owner) may invite or remove collaborators; any listed collaborator
may notify the others about a change.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cloud_ide.core.mailer import send_change_notification_email, send_collaboration_email
from cloud_ide.models.collaboration import ROLE_EDITOR, Collaboration, Collaborator
from cloud_ide.models.folder import Folder
from cloud_ide.models.user import User
from cloud_ide.services.folders import ensure_unique_folder_name, validate_folder_name

logger = logging.getLogger(__name__)


@dataclass
class InviteResult:
    collaboration: Collaboration
    added: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    created: bool = False

    @property
    def message(self) -> str:
        if self.duplicates:
            return (
                f"Added {len(self.added)} collaborator(s). "
                f"Already exists: {', '.join(self.duplicates)}"
            )
        return f"Added {len(self.added)} collaborator(s) successfully"


@dataclass
class NotifyResult:
    recipients: List[str]

    @property
    def notified_count(self) -> int:
        return len(self.recipients)


def find_collaboration(db: Session, project_id: int) -> Optional[Collaboration]:
    return db.query(Collaboration).filter(Collaboration.project_id == project_id).first()


def _clean_emails(emails: Optional[Iterable[str]]) -> List[str]:
    return [email.strip() for email in emails or [] if email and email.strip()]


def _build_entries(
    db: Session, emails: List[str], taken: Set[str]
) -> Tuple[List[Collaborator], List[str]]:
    """Split ``emails`` into new editor entries and duplicates of ``taken``.

    Matching is exact and case-sensitive. ``taken`` is updated in place.
    """
    entries = []
    duplicates = []
    for email in emails:
        if email in taken:
            duplicates.append(email)
            continue
        taken.add(email)
        user = db.query(User).filter(User.email == email).first()
        entries.append(
            Collaborator(
                user_id=user.id if user else None,
                email=email,
                role=ROLE_EDITOR,
            )
        )
    return entries, duplicates


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _send_invitations(entries: List[Collaborator], inviter_email: str, project_name: str):
    for entry in entries:
        logger.info(f"Sending invitation email to {entry.email} for project \"{project_name}\"")
        try:
            delivered = send_collaboration_email(entry.email, inviter_email, project_name)
        except Exception:
            logger.exception(f"Failed to send invitation email to {entry.email}")
            continue
        if not delivered:
            logger.error(f"Invitation email to {entry.email} was not delivered")


def invite_collaborators(
    db: Session, acting_user: User, project_id: int, emails: Optional[List[str]]
) -> InviteResult:
    emails = _clean_emails(emails)
    if not emails:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="collaboratorEmails is required",
        )

    project = db.get(Folder, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.parent_id is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Collaborators can only be added to a root folder",
        )

    collaboration = find_collaboration(db, project_id)

    is_owner = project.owner_id == acting_user.id
    is_collab_owner = collaboration is not None and collaboration.owner_id == acting_user.id
    if not is_owner and not is_collab_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to add collaborators to this project",
        )

    if collaboration is None:
        entries, duplicates = _build_entries(db, emails, set())
        collaboration = Collaboration(
            project_id=project.id,
            owner_id=acting_user.id,
            project_name=project.name,
            collaborators=entries,
        )
        db.add(collaboration)
        created = True
    else:
        taken = {c.email for c in collaboration.collaborators}
        entries, duplicates = _build_entries(db, emails, taken)
        if duplicates and not entries:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User(s) already exist: {', '.join(duplicates)}",
            )
        collaboration.collaborators.extend(entries)
        created = False

    _commit(db)
    db.refresh(collaboration)
    logger.info(
        f"User {acting_user.id} added {len(entries)} collaborator(s) to project {project.id}"
    )

    _send_invitations(entries, acting_user.email, project.name)

    return InviteResult(
        collaboration=collaboration,
        added=[entry.email for entry in entries],
        duplicates=duplicates,
        created=created,
    )


def remove_collaborator(
    db: Session, acting_user: User, collaboration_id: int, email: str
) -> Collaboration:
    collaboration = db.get(Collaboration, collaboration_id)
    if not collaboration:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Collaboration not found"
        )

    if collaboration.owner_id != acting_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to remove collaborators",
        )

    remaining = [c for c in collaboration.collaborators if c.email != email]
    if len(remaining) != len(collaboration.collaborators):
        collaboration.collaborators = remaining
        _commit(db)
        db.refresh(collaboration)
        logger.info(f"Removed {email} from collaboration {collaboration.id}")

    return collaboration


def list_user_collaborations(
    db: Session, user: User
) -> Tuple[List[Collaboration], List[Collaboration]]:
    """Active collaborations the user owns, and the ones shared with their email."""
    owned = (
        db.query(Collaboration)
        .filter(Collaboration.owner_id == user.id, Collaboration.is_active.is_(True))
        .order_by(Collaboration.id)
        .all()
    )
    shared = (
        db.query(Collaboration)
        .join(Collaborator, Collaborator.collaboration_id == Collaboration.id)
        .filter(
            Collaborator.email == user.email,
            Collaboration.owner_id != user.id,
            Collaboration.is_active.is_(True),
        )
        .distinct()
        .order_by(Collaboration.id)
        .all()
    )
    return owned, shared


def notify_collaborators(
    db: Session, acting_user: User, project_id: int, change_message: str
) -> NotifyResult:
    if not change_message or not change_message.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="changeMessage is required"
        )

    collaboration = find_collaboration(db, project_id)
    if not collaboration:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="This project is not in collaboration mode",
        )

    # Membership is checked by user id here, not by email
    is_owner = collaboration.owner_id == acting_user.id
    is_collaborator = any(
        c.user_id is not None and c.user_id == acting_user.id
        for c in collaboration.collaborators
    )
    if not is_owner and not is_collaborator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to notify collaborators",
        )

    recipients = []
    if not is_owner:
        recipients.append(collaboration.owner.email)
    for c in collaboration.collaborators:
        if c.user_id is None or c.user_id != acting_user.id:
            recipients.append(c.email)

    for email in recipients:
        try:
            delivered = send_change_notification_email(
                email, acting_user.email, collaboration.project_name, change_message
            )
        except Exception:
            logger.exception(f"Failed to notify {email}")
            continue
        if not delivered:
            logger.error(f"Change notification to {email} was not delivered")

    logger.info(
        f"User {acting_user.id} notified {len(recipients)} recipient(s) on project {project_id}"
    )
    return NotifyResult(recipients=recipients)


def list_registered_users(db: Session, acting_user: User) -> List[User]:
    return db.query(User).filter(User.id != acting_user.id).order_by(User.email).all()


def create_collaborative_project(
    db: Session, acting_user: User, project_name: str, emails: Optional[List[str]]
) -> Tuple[Folder, Collaboration]:
    """Create a root folder and its collaboration in a single transaction."""
    project_name = (project_name or "").strip()
    if not project_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Project name is required"
        )
    validate_folder_name(project_name)
    ensure_unique_folder_name(db, project_name, None, acting_user.id)

    entries, _ = _build_entries(db, _clean_emails(emails), set())

    try:
        project = Folder(
            name=project_name,
            owner_id=acting_user.id,
            parent_id=None,
            path=f"{acting_user.id}/{project_name}/",
        )
        db.add(project)
        db.flush()

        collaboration = Collaboration(
            project_id=project.id,
            owner_id=acting_user.id,
            project_name=project_name,
            collaborators=entries,
            is_active=True,
        )
        db.add(collaboration)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Error creating collaborative project '{project_name}'")
        raise

    db.refresh(project)
    db.refresh(collaboration)
    logger.info(f"User {acting_user.id} created collaborative project {project.id}")

    _send_invitations(entries, acting_user.email, project_name)
    return project, collaboration


def link_pending_invitations(db: Session, user: User) -> int:
    """Attach entries invited by email before ``user`` registered."""
    pending = (
        db.query(Collaborator)
        .filter(Collaborator.email == user.email, Collaborator.user_id.is_(None))
        .all()
    )
    for entry in pending:
        entry.user_id = user.id
    if pending:
        _commit(db)
        logger.info(f"Linked {len(pending)} pending invitation(s) to user {user.id}")
    return len(pending)
