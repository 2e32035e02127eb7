from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COURIER_RECON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    log_level: str = "INFO"

    # Rule flags (kg unless noted)
    overbilling_tolerance_kg: float = 0.1
    high_uplift_kg: float = 0.5
    roundup_actual_below_kg: float = 1.0
    roundup_charged_at_least_kg: float = 1.5
    value_mismatch_min_value: float = 1000.0
    value_mismatch_max_actual_kg: float = 0.5

    # Carrier normalization
    default_charged_weight_kg: float = 0.5
    grams_mean_lower: float = 50.0
    grams_mean_upper: float = 2000.0
    # Delhivery exports carry no physical weight: 360 of product value ~ 450 g
    delhivery_grams_per_value_unit: float = 450 / 360

    # Outlier detection
    outlier_min_group_size: int = Field(default=5, ge=1)
    outlier_low_percentile: float = Field(default=0.05, gt=0, lt=1)
    outlier_high_percentile: float = Field(default=0.95, gt=0, lt=1)

    # KPIs / insights
    top_pins_limit: int = Field(default=10, ge=0)
    insight_dispute_rate_pct: float = 15.0
    insight_avg_overbilling_value: float = 50.0
    insight_carrier_dispute_rate_pct: float = 20.0


settings = Settings()
