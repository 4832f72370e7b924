from pathlib import Path

from pydantic import ConfigDict, Field

from wechat_pay.schemas.base import BaseSchema


class WeChatPayCredentials(BaseSchema):
    """
    WeChat Pay merchant credentials.

    Identifies the merchant to WeChat Pay: the ids and API secret are used to
    sign requests, the client certificate authenticates the TLS channel.
    """

    model_config = ConfigDict(frozen=True)

    mch_id: str = Field(
        ...,
        min_length=1,
        description="Merchant id issued by WeChat Pay",
    )
    app_id: str = Field(
        ...,
        min_length=1,
        description="App id (official account, mini program or app) bound to the merchant",
    )
    secret_key: str = Field(
        ...,
        min_length=1,
        description="API secret key used to sign requests",
    )
    cert_path: Path = Field(
        ...,
        description="Path to the merchant client certificate (apiclient_cert.pem)",
    )
    key_path: Path = Field(
        ...,
        description="Path to the merchant client private key (apiclient_key.pem)",
    )
    key_password: str | None = Field(
        default=None,
        description="Password of the client private key, if it is encrypted",
    )
