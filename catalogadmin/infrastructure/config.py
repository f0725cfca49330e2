"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Document store ("sql" or "memory")
    store_backend: str = "sql"
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Bulk import
    import_data_dir: str = "public/data"
    import_records_file: str = "products.json"
    import_ignored_entries: list[str] = [".DS_Store"]
    import_error_sample_size: int = 5
    import_error_message_max_length: int = 200
    import_progress_interval: int = 100

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
