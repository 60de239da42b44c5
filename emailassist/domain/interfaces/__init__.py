from .i_registry_repository import IRegistryRepository, SaveRegistryResult
from .i_email_sender_gateway import IEmailSenderGateway, SendEmailResult
from .i_inbox_gateway import IInboxGateway

__all__ = [
    "IRegistryRepository",
    "SaveRegistryResult",
    "IEmailSenderGateway",
    "SendEmailResult",
    "IInboxGateway",
]
