from laptop_api.domains.mail.services import MailService


def get_mail_service() -> MailService:
    """Зависимость для сервиса почты (подменяется в тестах)"""
    return MailService()
