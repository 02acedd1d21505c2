"""
Configuration settings for the Hardhat Detection Service.
"""
import json
from typing import Annotated, List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.
    """
    PROJECT_NAME: str = "Hardhat Detection Service"
    API_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    PROJECT_DESCRIPTION: str = "Helmet and vest compliance detection, history and statistics"

    # CORS settings
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Roboflow hosted detector
    ROBOFLOW_API_KEY: Optional[str] = None
    ROBOFLOW_MODEL_ID: Optional[str] = None
    ROBOFLOW_MODEL_VERSION: str = "1"
    ROBOFLOW_CONFIDENCE: float = 0.4
    ROBOFLOW_OVERLAP: float = 0.5
    ROBOFLOW_INFER_URL: str = "https://detect.roboflow.com"
    ROBOFLOW_API_URL: str = "https://api.roboflow.com"

    # Validation runs use a lower threshold to surface borderline detections
    VALIDATION_CONFIDENCE: float = 0.3

    # Outbound call limits (seconds)
    DETECTOR_TIMEOUT: float = 30.0
    DETECTOR_CONNECT_TIMEOUT: float = 10.0

    # Demo mode: canned predictions, no network
    MOCK_INFER: bool = False

    # Batch processing
    MAX_BATCH_FILES: int = 10
    MAX_CONCURRENT_INFERENCES: int = 4

    # Detection history
    HISTORY_MAX_RECORDS: int = 1000

    # Pagination defaults
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 1000

    # Statistics
    DEFAULT_PERIOD: str = "7d"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
