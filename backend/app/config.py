# backend/app/config.py
from pydantic_settings import BaseSettings
from pathlib import Path
from pydantic import field_validator

class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Environment
    environment: str = "development"  # development, production

    # Paths
    log_dir: Path = Path("logs")

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]
    @field_validator("cors_origins", mode="before")
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [v]
        return v

    # ===== EXPORT SETTINGS =====
    # Filename is <prefix>_<documentType>_<timestamp>.xlsx
    export_filename_prefix: str = "Extraction"

    # Column widths in characters (header must always fit, long values are clamped)
    export_min_column_width: int = 10
    export_max_column_width: int = 60
    # Raw JSON dumps (fallback / raw data sheets) get a single wide column
    export_raw_text_column_width: int = 100

    class Config:
        # Point explicitly to backend/.env so scripts run from repo root still load variables
        env_file = Path(__file__).resolve().parent.parent / ".env"
        case_sensitive = False
        extra = "ignore"  # Allow future env vars without breaking startup

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.log_dir.mkdir(parents=True, exist_ok=True)

# Global settings instance
settings = Settings()
