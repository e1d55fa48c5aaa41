"""Application settings and configuration management."""
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SmoobuSettings(BaseSettings):
    """Smoobu PMS API configuration (rates feed, availability, bookings)."""

    base_url: str = "https://login.smoobu.com/api"
    api_key: SecretStr = SecretStr("")
    apartment_id: str = ""
    channel_id: int = 1627949  # "Direct Booking" channel in the Smoobu dashboard
    request_timeout: int = 30
    max_retries: int = 3

    model_config = SettingsConfigDict(env_prefix="SMOOBU_")


class StripeSettings(BaseSettings):
    """Stripe payment-link configuration."""

    secret_key: SecretStr = SecretStr("")
    webhook_secret: SecretStr = SecretStr("")
    currency: str = "eur"
    product_name: str = "Caution - Séjour Au Marais"

    model_config = SettingsConfigDict(env_prefix="STRIPE_")


class EmailSettings(BaseSettings):
    """Transactional email configuration (Resend API)."""

    base_url: str = "https://api.resend.com"
    api_key: SecretStr = SecretStr("")
    from_email: str = "reservation@au-marais.fr"
    from_name: str = "Au Marais"
    admin_emails: list[str] = Field(default_factory=lambda: ["au-marais@hotmail.com"])
    request_timeout: int = 10

    model_config = SettingsConfigDict(env_prefix="EMAIL_")


class RedisSettings(BaseSettings):
    """Redis configuration for the reservation store and operator sessions."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    socket_timeout: int = 5
    socket_connect_timeout: int = 5

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class PricingSettings(BaseSettings):
    """Published rates and long-stay discount percentages."""

    nightly_rate: Decimal = Decimal("120")
    cleaning_fee: Decimal = Decimal("50")
    tourist_tax_per_night: Decimal = Decimal("2.88")  # per guest per night
    weekly_discount: Decimal = Decimal("10")
    biweekly_discount: Decimal = Decimal("15")
    monthly_discount: Decimal = Decimal("20")
    max_guests: int = 4

    model_config = SettingsConfigDict(env_prefix="PRICING_")


class AdminSettings(BaseSettings):
    """Operator authentication and session liveness."""

    password: SecretStr = SecretStr("")
    session_token: SecretStr = SecretStr("")
    inactivity_timeout_seconds: int = 600
    warning_before_seconds: int = 60
    cookie_name: str = "adminToken"
    confirmation_token_secret: SecretStr = SecretStr("default-secret-change-in-production")
    confirmation_token_max_age_seconds: int = 7 * 24 * 60 * 60

    model_config = SettingsConfigDict(env_prefix="ADMIN_")


class PromoCodeSettings(BaseSettings):
    """Promo-code validation service."""

    service_url: str = ""  # Remote validation endpoint; catalog file is used when empty
    catalog_path: str = "data/promo-codes.json"
    request_timeout: int = 10

    model_config = SettingsConfigDict(env_prefix="PROMO_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    site_url: str = "https://au-marais.fr"

    # Sub-settings
    smoobu: SmoobuSettings = SmoobuSettings()
    stripe: StripeSettings = StripeSettings()
    email: EmailSettings = EmailSettings()
    redis: RedisSettings = RedisSettings()
    pricing: PricingSettings = PricingSettings()
    admin: AdminSettings = AdminSettings()
    promo: PromoCodeSettings = PromoCodeSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_required(self) -> list[str]:
        """Validate required vars for the operator workflow. Returns list of missing var names."""
        missing = []
        if not self.smoobu.api_key.get_secret_value():
            missing.append("SMOOBU_API_KEY")
        if not self.smoobu.apartment_id.strip():
            missing.append("SMOOBU_APARTMENT_ID")
        if not self.admin.session_token.get_secret_value():
            missing.append("ADMIN_SESSION_TOKEN")
        return missing

    @property
    def is_production(self) -> bool:
        """True when running against production services."""
        return self.environment == "prod"

    def reservation_url(self, reservation_id: str) -> str:
        """Operator action URL for a reservation (link-token links append ``?token=``)."""
        return f"{self.site_url.rstrip('/')}/r/{reservation_id}"


# Global settings instance
settings = Settings()
