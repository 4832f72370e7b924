"""
Request builders for the WeChat Pay enterprise payment API.

Each builder merges caller parameters with the merchant credentials. The
credential fields and sign_type always win over values the caller passed.
"""

from wechat_pay.schemas import (
    GetPublicKeyPayload,
    QueryTransferBankParams,
    QueryTransferBankPayload,
    QueryTransferParams,
    QueryTransferPayload,
    SignType,
    TransferBankParams,
    TransferBankPayload,
    TransferParams,
    TransferPayload,
    WeChatPayCredentials,
)


def build_transfer_payload(
    params: TransferParams,
    credentials: WeChatPayCredentials,
) -> TransferPayload:
    return TransferPayload.model_validate(
        {
            **params.model_dump(exclude_none=True),
            "mchid": credentials.mch_id,
            "mch_appid": credentials.app_id,
            "sign_type": SignType.NO_SIGN_TYPE,
        }
    )


def build_query_transfer_payload(
    params: QueryTransferParams,
    credentials: WeChatPayCredentials,
) -> QueryTransferPayload:
    return QueryTransferPayload.model_validate(
        {
            **params.model_dump(exclude_none=True),
            "mch_id": credentials.mch_id,
            "appid": credentials.app_id,
            "sign_type": SignType.NO_SIGN_TYPE,
        }
    )


def build_transfer_bank_payload(
    params: TransferBankParams,
    credentials: WeChatPayCredentials,
    enc_bank_no: str,
    enc_true_name: str,
) -> TransferBankPayload:
    """
    Build a bank transfer payload.

    Args:
        params: Caller parameters, with the bank card fields in plain text
        credentials: Merchant credentials
        enc_bank_no: Encrypted, base64 encoded bank card number
        enc_true_name: Encrypted, base64 encoded card holder name

    Returns:
        TransferBankPayload: Payload carrying the encrypted fields only
    """
    return TransferBankPayload.model_validate(
        {
            **params.model_dump(exclude_none=True),
            "enc_bank_no": enc_bank_no,
            "enc_true_name": enc_true_name,
            "mch_id": credentials.mch_id,
            "sign_type": SignType.NO_SIGN_TYPE,
        }
    )


def build_query_transfer_bank_payload(
    params: QueryTransferBankParams,
    credentials: WeChatPayCredentials,
) -> QueryTransferBankPayload:
    return QueryTransferBankPayload.model_validate(
        {
            **params.model_dump(exclude_none=True),
            "mch_id": credentials.mch_id,
            "sign_type": SignType.NO_SIGN_TYPE,
        }
    )


def build_get_public_key_payload(credentials: WeChatPayCredentials) -> GetPublicKeyPayload:
    # The key endpoint only accepts MD5 and requires sign_type to be sent
    return GetPublicKeyPayload(mch_id=credentials.mch_id, sign_type=SignType.MD5)
