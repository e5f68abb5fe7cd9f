from .user_commands import ChangeEmail, CreateUser, DeactivateUser, RenameUser

__all__ = ["CreateUser", "ChangeEmail", "RenameUser", "DeactivateUser"]
