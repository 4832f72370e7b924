import logging
from enum import StrEnum
from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL

from wechat_pay.schemas import WeChatPayCredentials

PACKAGE_DIR = Path(__file__).parent.parent


class Environment(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    STG = "stg"
    PRD = "prd"


class Settings(BaseSettings):
    """
    Library settings.

    These parameters can be configured
    with environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=False,
        extra="ignore",
    )

    # Current working environment
    current_environment: Environment = Environment.LOCAL
    log_level: int = logging.INFO
    log_dir: Path = Path("logs")

    # Merchant credentials
    wechat_pay_mch_id: str = ""
    wechat_pay_app_id: str = ""
    wechat_pay_secret_key: str = ""
    wechat_pay_cert_path: Path | None = None
    wechat_pay_key_path: Path | None = None
    wechat_pay_key_password: str | None = None

    # Endpoints
    wechat_pay_api_base: str = "https://api.mch.weixin.qq.com"
    wechat_pay_risk_api_base: str = "https://fraud.mch.weixin.qq.com"

    # Directory holding the cached RSA public key, defaults to the package directory
    wechat_pay_public_key_dir: Path | None = None

    @property
    def api_base_url(self) -> URL:
        """
        WeChat Pay merchant API root.
        """
        return URL(self.wechat_pay_api_base)

    @property
    def risk_api_base_url(self) -> URL:
        """
        WeChat Pay risk API root, which issues the RSA public key.
        """
        return URL(self.wechat_pay_risk_api_base)

    @computed_field
    @property
    def public_key_dir(self) -> Path:
        """
        Directory for the persisted RSA public key.
        """
        return self.wechat_pay_public_key_dir or PACKAGE_DIR

    @property
    def wechat_pay_credentials(self) -> WeChatPayCredentials:
        """
        Assemble WeChat Pay merchant credentials from settings.

        Raises:
            pydantic.ValidationError: If a credential is missing
        """
        return WeChatPayCredentials(
            mch_id=self.wechat_pay_mch_id,
            app_id=self.wechat_pay_app_id,
            secret_key=self.wechat_pay_secret_key,
            cert_path=self.wechat_pay_cert_path,
            key_path=self.wechat_pay_key_path,
            key_password=self.wechat_pay_key_password,
        )


settings = Settings()
