from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    db_echo: bool = False
    # Создавать таблицы при старте приложения
    db_populate: bool = True

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    log_level: str = "INFO"
    log_format: str = "plain"

    default_page_size: int = 5
    max_page_size: int = 100

    mail_activated: bool = False
    mail_host: str = "localhost"
    mail_port: int = 25
    mail_from: str = "Laptop REST Server <laptop.rest@acme.com>"
    mail_to: str = "admin@acme.com"

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
