from config.env import env, env_to_enum
from src.emails.enums import EmailSendingStrategy

# local | provider
EMAIL_SENDING_STRATEGY = env_to_enum(
    EmailSendingStrategy, env("EMAIL_SENDING_STRATEGY", default="local")
)

DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL", default="seals@localhost")

# Toggle for application submitted/decided emails
SEAL_NOTIFICATIONS_ENABLED = env.bool("SEAL_NOTIFICATIONS_ENABLED", default=True)

if EMAIL_SENDING_STRATEGY == EmailSendingStrategy.LOCAL:
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

if EMAIL_SENDING_STRATEGY == EmailSendingStrategy.PROVIDER:
    EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
    EMAIL_HOST = env("EMAIL_HOST")
    EMAIL_HOST_USER = env("EMAIL_HOST_USER")
    EMAIL_HOST_PASSWORD = env("EMAIL_HOST_PASSWORD")
    EMAIL_PORT = env.int("EMAIL_PORT")
    EMAIL_USE_TLS = env.bool("EMAIL_USE_TLS")
    EMAIL_TIMEOUT = env.int("EMAIL_TIMEOUT", default=10)
    SERVER_EMAIL = EMAIL_HOST_USER
