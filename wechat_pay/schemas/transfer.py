from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from wechat_pay.schemas.base import ProviderSchema


class CheckName(StrEnum):
    NO_CHECK = "NO_CHECK"
    FORCE_CHECK = "FORCE_CHECK"


class SignType(StrEnum):
    MD5 = "MD5"
    HMAC_SHA256 = "HMAC-SHA256"
    # Signed with MD5, sign_type itself is not transmitted
    NO_SIGN_TYPE = "no_sign_type"


# Passed through as given, WeChat Pay validates amounts
Amount = int | float | str


def empty_to_none(value: Any) -> Any:
    return None if value == "" else value


# ==================== Requests ====================


class TransferParams(ProviderSchema):
    """Caller parameters of a transfer to a user's WeChat wallet"""

    partner_trade_no: str | None = Field(
        default=None, description="Merchant order number, unique per merchant"
    )
    openid: str | None = Field(default=None, description="Payee openid under the merchant app id")
    check_name: CheckName = CheckName.NO_CHECK
    re_user_name: str | None = Field(
        default=None, description="Payee real name, required with FORCE_CHECK"
    )
    amount: Amount | None = Field(default=None, description="Amount in fen")
    desc: str | None = None
    spbill_create_ip: str | None = None
    device_info: str | None = None


class TransferPayload(TransferParams):
    mch_appid: str
    mchid: str
    sign_type: SignType


class QueryTransferParams(ProviderSchema):
    """Caller parameters of a wallet transfer query"""

    partner_trade_no: str | None = None


class QueryTransferPayload(QueryTransferParams):
    appid: str
    mch_id: str
    sign_type: SignType


class TransferBankParams(ProviderSchema):
    """
    Caller parameters of a transfer to a bank card.

    enc_bank_no and enc_true_name are given in plain text and encrypted
    with the WeChat Pay RSA public key before sending.
    """

    partner_trade_no: str | None = None
    enc_bank_no: str = Field(..., description="Bank card number")
    enc_true_name: str = Field(..., description="Card holder name")
    bank_code: str | None = Field(
        default=None, description="WeChat Pay bank code, e.g. 1002 for ICBC"
    )
    amount: Amount | None = Field(default=None, description="Amount in fen")
    desc: str | None = None


class TransferBankPayload(TransferBankParams):
    mch_id: str
    sign_type: SignType


class QueryTransferBankParams(ProviderSchema):
    """Caller parameters of a bank transfer query"""

    partner_trade_no: str | None = None


class QueryTransferBankPayload(QueryTransferBankParams):
    mch_id: str
    sign_type: SignType


class GetPublicKeyPayload(ProviderSchema):
    mch_id: str
    sign_type: SignType = SignType.MD5


# ==================== Responses ====================


class WeChatPayResult(ProviderSchema):
    """Fields common to every WeChat Pay response"""

    return_code: str
    return_msg: str | None = None
    result_code: str | None = None
    err_code: str | None = None
    err_code_des: str | None = None
    nonce_str: str | None = None
    sign: str | None = None


class TransferResponse(WeChatPayResult):
    mch_appid: str | None = None
    mchid: str | None = None
    device_info: str | None = None
    partner_trade_no: str | None = None
    payment_no: str | None = None
    payment_time: str | None = None


class QueryTransferResponse(WeChatPayResult):
    partner_trade_no: str | None = None
    appid: str | None = None
    mch_id: str | None = None
    detail_id: str | None = None
    status: str | None = Field(default=None, description="SUCCESS, FAILED or PROCESSING")
    reason: str | None = None
    openid: str | None = None
    transfer_name: str | None = None
    payment_amount: int | None = None
    transfer_time: str | None = None
    payment_time: str | None = None
    desc: str | None = None

    @field_validator("payment_amount", mode="before")
    def empty_amount_to_none(cls, value: Any) -> Any:
        return empty_to_none(value)


class TransferBankResponse(WeChatPayResult):
    mch_id: str | None = None
    partner_trade_no: str | None = None
    amount: int | None = None
    payment_no: str | None = None
    cmms_amt: int | None = Field(default=None, description="Service fee in fen")

    @field_validator("amount", "cmms_amt", mode="before")
    def empty_amount_to_none(cls, value: Any) -> Any:
        return empty_to_none(value)


class QueryTransferBankResponse(WeChatPayResult):
    mch_id: str | None = None
    partner_trade_no: str | None = None
    payment_no: str | None = None
    bank_no_md5: str | None = None
    true_name_md5: str | None = None
    amount: int | None = None
    status: str | None = Field(
        default=None, description="PROCESSING, SUCCESS, FAILED or BANK_FAIL"
    )
    cmms_amt: int | None = None
    create_time: str | None = None
    pay_succ_time: str | None = None
    reason: str | None = None

    @field_validator("amount", "cmms_amt", mode="before")
    def empty_amount_to_none(cls, value: Any) -> Any:
        return empty_to_none(value)


class GetPublicKeyResponse(WeChatPayResult):
    mch_id: str | None = None
    pub_key: str | None = None
