# marksledger/core/config.py
"""Application configuration using Pydantic."""
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    database_url: str = 'postgresql+asyncpg://localhost/marksledger'

    app_version: str = '1.0.0'
    environment: str = 'development'
    log_level: str = 'info'
    allowed_origins: List[str] = ['*']

    # Connection pool (ignored for drivers without a queue pool)
    db_pool_size: int = 15
    db_max_overflow: int = 25
    db_pool_timeout: int = 60
    db_pool_recycle: int = 1800

    # Ledger import
    import_max_errors: int = 200
    import_max_file_size: int = 10 * 1024 * 1024  # 10MB
    ledger_strict_compulsory_columns: bool = False

    # Role allowed to act on locked exams
    privileged_role: str = 'SUPER_ADMIN'

    model_config = {
        'env_file': '.env',
        'extra': 'ignore'
    }

settings = Settings()
