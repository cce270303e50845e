import os


def get_settings_module() -> str:
    # Environment comes from APP_ENV, defaulting to 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "academy_manager.config.production"

    if env in {"test", "testing"}:
        return "academy_manager.config.testing"

    return "academy_manager.config.development"
