from .user import User
from .population import Population
from .document import Document
from .application import Application
from .audit_log import AuditLog
from .notification import Notification
from .revoked_token import RevokedToken



__all__ = ["User", "Population", "Document", "Application", "AuditLog", "Notification", "RevokedToken"]
