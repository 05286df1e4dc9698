# backend/projecthub/core/settings.py

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # URL базы данных для SQLAlchemy
    db_url: str = "sqlite:///./projecthub.db"

    # Debug-режим: цветной вывод логов, подробные ответы об ошибках
    app_debug: bool = True

    # Окружение: dev / prod
    environment: str = "dev"

    # Флаг тестового режима (можно переопределить переменной окружения TESTING=1)
    testing: bool = False

    # Логи: уровень (пусто = DEBUG в debug-режиме, иначе INFO) и принудительный JSON
    log_level: str = ""
    log_json: bool = False

    # JWT
    access_token_secret: str = "dev-secret-key-change-me"
    access_token_expire_minutes: int = 60 * 24
    jwt_algorithm: str = "HS256"
    cookie_secure: bool = False

    # CORS
    allowed_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Вложения к задачам
    upload_dir: str = "./public/attachments"
    max_attachments_per_upload: int = 10
    max_attachment_size_bytes: int = 10 * 1024 * 1024

    # Повторы при конфликтах записи (optimistic locking, duplicate key, write conflict)
    retry_max_retries: int = 3
    retry_initial_delay_ms: int = 100
    retry_max_delay_ms: int = 2000
    retry_jitter_ms: int = 100

    # Настройки pydantic-settings (v2)
    model_config = SettingsConfigDict(
        env_file=".env",              # читаем переменные из .env
        env_file_encoding="utf-8",
        extra="ignore",               # игнорируем любые лишние переменные
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "dev"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


settings = Settings()

# Авто-определение тестового режима, если запущен pytest
if os.getenv("PYTEST_CURRENT_TEST"):
    settings.testing = True
