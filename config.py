"""
Конфигурация парсера брокерских отчётов.
Загружает настройки из переменных окружения / .env файла.

Все поля имеют значения по умолчанию: парсер работает и без окружения.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Настройки парсера"""

    # === Приложение ===
    app_name: str = "BrokerReportParser"
    debug: bool = False

    # === Лимиты входных данных ===
    max_file_size_mb: int = 20

    # === Эвристики поиска таблицы позиций ===
    spreadsheet_max_scan_rows: int = 250   # Сколько строк листа смотрим в поисках заголовка
    html_header_probe_rows: int = 4        # Сколько первых строк HTML-таблицы пробуем как заголовок
    section_header_probe_rows: int = 4     # Сколько строк после "Positions" пробуем как заголовок
    mt5_min_cells: int = 10                # Минимум <td> в строке позиции MT5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "BROKER_REPORT_"
        extra = "ignore"


# Глобальный экземпляр настроек
# Загружается при импорте модуля
settings = Settings()
