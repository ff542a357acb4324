from verifypro.models.app_config import AppConfig
from verifypro.models.user import User
from verifypro.models.document_request import DocumentRequest
from verifypro.models.document import Document
from verifypro.models.trusted_source import TrustedSourceLink

__all__ = ["AppConfig", "User", "DocumentRequest", "Document", "TrustedSourceLink"]
