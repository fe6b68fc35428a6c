from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cloud_ide.core.database import Base

ROLE_EDITOR = "editor"
ROLE_VIEWER = "viewer"


class Collaboration(Base):
    __tablename__ = "collaborations"

    id = Column(Integer, primary_key=True, index=True)
    # Always a root folder, one collaboration per project
    project_id = Column(
        Integer, ForeignKey("folders.id"), unique=True, nullable=False, index=True
    )
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    project_name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner = relationship("User")
    collaborators = relationship(
        "Collaborator",
        back_populates="collaboration",
        cascade="all, delete-orphan",
        order_by="Collaborator.id",
    )


class Collaborator(Base):
    __tablename__ = "collaborators"

    id = Column(Integer, primary_key=True, index=True)
    collaboration_id = Column(
        Integer, ForeignKey("collaborations.id"), nullable=False, index=True
    )
    # NULL until the invited email registers
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    role = Column(String(16), nullable=False, default=ROLE_EDITOR)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    collaboration = relationship("Collaboration", back_populates="collaborators")
