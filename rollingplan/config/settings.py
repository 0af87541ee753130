from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    timezone: str = Field(default="Europe/Berlin", validation_alias="ROLLINGPLAN_TIMEZONE")
    log_level: str = Field(default="INFO", validation_alias="ROLLINGPLAN_LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="ROLLINGPLAN_LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="ROLLINGPLAN_LOG_JSON")
    planning_window_days: int = Field(
        default=7,
        ge=7,
        le=14,
        validation_alias="ROLLINGPLAN_PLANNING_WINDOW_DAYS",
        description="Forward planning horizon in days (today inclusive)",
    )
    lookback_days: int = Field(
        default=35,
        validation_alias="ROLLINGPLAN_LOOKBACK_DAYS",
        description="History window for load ratio (28 chronic + 7 acute)",
    )
    min_days_with_data: int = Field(default=7, validation_alias="ROLLINGPLAN_MIN_DAYS_WITH_DATA")

    # Load ratio tiers
    acwr_detraining_below: float = Field(default=0.8, validation_alias="ROLLINGPLAN_ACWR_DETRAINING_BELOW")
    acwr_safe_max: float = Field(default=1.5, validation_alias="ROLLINGPLAN_ACWR_SAFE_MAX")
    acwr_elevated_max: float = Field(default=2.0, validation_alias="ROLLINGPLAN_ACWR_ELEVATED_MAX")

    # Deload
    deload_hard_factor: float = Field(default=0.55, validation_alias="ROLLINGPLAN_DELOAD_HARD_FACTOR")
    deload_easy_factor: float = Field(default=0.75, validation_alias="ROLLINGPLAN_DELOAD_EASY_FACTOR")

    # Readiness gate
    readiness_no_change_above: float = Field(default=65, validation_alias="ROLLINGPLAN_READINESS_NO_CHANGE_ABOVE")
    readiness_severe_below: float = Field(default=50, validation_alias="ROLLINGPLAN_READINESS_SEVERE_BELOW")

    # Hard-session budget
    default_hard_ceiling: int = Field(default=3, validation_alias="ROLLINGPLAN_DEFAULT_HARD_CEILING")
    hard_ceiling_min: int = Field(default=2, validation_alias="ROLLINGPLAN_HARD_CEILING_MIN")
    hard_ceiling_max: int = Field(default=5, validation_alias="ROLLINGPLAN_HARD_CEILING_MAX")

    # Session durations (minutes) when baseline is silent
    long_run_minutes: int = Field(default=70, validation_alias="ROLLINGPLAN_LONG_RUN_MINUTES")
    zone2_minutes: int = Field(default=45, validation_alias="ROLLINGPLAN_ZONE2_MINUTES")
    strength_minutes: int = Field(default=60, validation_alias="ROLLINGPLAN_STRENGTH_MINUTES")
    tempo_minutes: int = Field(default=30, validation_alias="ROLLINGPLAN_TEMPO_MINUTES")
    intervals_minutes: int = Field(default=35, validation_alias="ROLLINGPLAN_INTERVALS_MINUTES")
    max_minutes_per_day: int = Field(default=120, validation_alias="ROLLINGPLAN_MAX_MINUTES_PER_DAY")
    marathon_build_max_minutes_per_day: int = Field(
        default=150,
        validation_alias="ROLLINGPLAN_MARATHON_BUILD_MAX_MINUTES_PER_DAY",
    )

    # Weekly frequencies when baseline is silent
    default_endurance_frequency: int = Field(default=3, validation_alias="ROLLINGPLAN_DEFAULT_ENDURANCE_FREQUENCY")
    default_strength_frequency: int = Field(default=2, validation_alias="ROLLINGPLAN_DEFAULT_STRENGTH_FREQUENCY")

    polarized_hard_share_max: float = Field(default=0.25, validation_alias="ROLLINGPLAN_POLARIZED_HARD_SHARE_MAX")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    model_config = SettingsConfigDict(
        env_file=".env",
        populate_by_name=True,
        extra="ignore",
    )


settings = Settings()
