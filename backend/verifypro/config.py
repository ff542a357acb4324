from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "VerifyPro"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    min_password_length: int = 6
    session_ttl_seconds: int = 8 * 60 * 60

    # Simulated AI verification
    auto_verify: bool = True
    verification_delay_seconds: float = 4.0
    confidence_min: int = 70
    confidence_max: int = 100

    # Trusted source (DigiLocker) import
    trusted_import_score: int = 98
    digilocker_connect_delay_seconds: float = 2.0

    urgency_threshold_days: int = 3
    default_request_due_days: int = 7

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def uploads_dir(self) -> Path:
        return self.data_path / "uploads"

    model_config = {"env_prefix": "VERIFYPRO_"}


settings = Settings()
