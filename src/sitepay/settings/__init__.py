import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "sitepay.settings.production"

    if env in {"test", "testing"}:
        return "sitepay.settings.testing"

    return "sitepay.settings.development"
