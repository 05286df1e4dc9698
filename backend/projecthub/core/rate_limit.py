# Rate limiting configuration for ProjectHub
# Использует slowapi для защиты API от перебора паролей и абуза

from slowapi import Limiter
from slowapi.util import get_remote_address

# Инициализация лимитера с использованием IP адреса клиента
limiter = Limiter(key_func=get_remote_address)

# Предустановленные лимиты для различных типов операций
RATE_LIMITS = {
    # Аутентификация (регистрация, логин)
    "auth_operations": "20/minute",
    # Загрузка файлов
    "upload_operations": "30/minute",
}

__all__ = ["limiter", "RATE_LIMITS"]
