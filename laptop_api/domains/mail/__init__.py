from laptop_api.domains.mail.services import MailService

__all__ = ["MailService"]
