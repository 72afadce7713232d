from pydantic_settings import BaseSettings
from pydantic import SecretStr
from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    app_name: str = "Mindwave API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Supabase Configuration
    supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
    supabase_service_role_key: SecretStr = SecretStr(os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""))

    # JWT / cookie Configuration
    jwt_secret: str = os.getenv("JWT_SECRET", "mindwave_demo_secret")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_days: int = 7
    cookie_name: str = "mindwave_token"
    cookie_secure: bool = os.getenv("COOKIE_SECURE", "false").lower() == "true"

    # CORS
    client_origins: List[str] = [
        os.getenv("CLIENT_ORIGIN", "http://localhost:8081"),
        "http://localhost:5500",
        "http://127.0.0.1:5500",
        "http://127.0.0.1:8081",
    ]

    # Campus account rules
    student_email_pattern: str = r"\.mca25@cmrit\.ac\.in$"
    admin_email_pattern: str = r"\.mca@cmrit\.ac\.in$"
    min_password_length: int = 6
    reset_code_ttl_minutes: int = 10

    # Time attack
    time_attack_question_count: int = 5
    time_attack_points: int = 10
    leaderboard_size: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
