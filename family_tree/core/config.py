from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "dev"
    root_path: str = ""
    log_level: str = "INFO"
    cors_allow_origins: str = "*"

    # Creates a small demo family on startup when the table is empty.
    seed_demo_data: bool = False

    postgres_db: str = "family_tree"
    postgres_user: str = "family_user"
    postgres_password: str = "family_pass"
    postgres_host: str = "db"
    postgres_port: int = 5432
    database_url_override: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def allowed_origins(self) -> list[str]:
        origins = [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]
        return origins or ["*"]


settings = Settings()
