"""Application configuration using Pydantic Settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "School Admin"
    debug: bool = False
    log_level: str = "INFO"

    # MongoDB (transactions need a replica set, e.g. mongodb://localhost:27017/?replicaSet=rs0)
    mongodb_url: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongodb_db_name: str = "schooladmin"

    # Listing
    default_page_size: int = 25
    max_page_size: int = 200

    # Audit: used when a request carries no X-User-Email header
    default_actor: str = "system"

    # CORS (comma-separated origins, e.g. "https://admin.example.com,http://localhost:4200")
    cors_origins: str = "http://localhost:4200"


settings = Settings()
