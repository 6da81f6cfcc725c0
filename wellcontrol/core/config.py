import os
from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # CORE SETTINGS
    ENV: str = os.getenv("ENV", "development")
    DEBUG: bool = ENV == "development"
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Well Control Hydraulics API"

    # CORS SETTINGS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @field_validator("BACKEND_CORS_ORIGINS")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # HYDRAULICS DEFAULTS
    # Multiplier applied to the computed swab pressure to get a recommended SABP
    SWAB_SAFETY_FACTOR: float = float(os.getenv("SWAB_SAFETY_FACTOR", "1.15"))
    DEFAULT_ECCENTRICITY_FACTOR: float = float(os.getenv("DEFAULT_ECCENTRICITY_FACTOR", "1.0"))
    # Integration slice length along the domain (m)
    DEFAULT_STEP_M: float = float(os.getenv("DEFAULT_STEP_M", "5.0"))
    # Bit marching step for trips (m), one stand by default
    DEFAULT_TRIP_STEP_M: float = float(os.getenv("DEFAULT_TRIP_STEP_M", "27.0"))
    # Generalized Reynolds number below which non-Newtonian annular flow is laminar
    LAMINAR_REYNOLDS_THRESHOLD: float = float(os.getenv("LAMINAR_REYNOLDS_THRESHOLD", "2100"))

    # LOGGING SETTINGS
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
