from cloud_ide.models.user import User
from cloud_ide.models.token import Token
from cloud_ide.models.folder import Folder
from cloud_ide.models.file import File
from cloud_ide.models.collaboration import Collaboration, Collaborator

__all__ = ["User", "Token", "Folder", "File", "Collaboration", "Collaborator"]
