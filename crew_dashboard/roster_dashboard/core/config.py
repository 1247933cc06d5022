# roster_dashboard/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Dict


class Settings(BaseSettings):
    app_name: str = "Crew Roster Dashboard"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8050

    # Roster service connection
    api_base_url: str = "http://127.0.0.1:8000/api/v1"
    request_timeout: float = 30.0

    # View sizing
    crew_lookup_limit: int = 100
    flights_page_size: int = 20
    history_limit: int = 20
    duty_chart_limit: int = 10
    schedule_display_limit: int = 10

    # Roster generation defaults
    default_start_date: str = "2023-10-01"
    default_end_date: str = "2023-10-01"
    optimization_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "crew_utilization": 1.0,
            "violation_penalty": 2.0,
            "fairness": 0.5,
        }
    )

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DASHBOARD_", extra="ignore")


settings = Settings()
