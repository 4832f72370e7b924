from .base import BaseSchema, ProviderSchema
from .wechat_pay import WeChatPayCredentials
from .transfer import (
    CheckName,
    SignType,
    TransferParams,
    TransferPayload,
    QueryTransferParams,
    QueryTransferPayload,
    TransferBankParams,
    TransferBankPayload,
    QueryTransferBankParams,
    QueryTransferBankPayload,
    GetPublicKeyPayload,
    WeChatPayResult,
    TransferResponse,
    QueryTransferResponse,
    TransferBankResponse,
    QueryTransferBankResponse,
    GetPublicKeyResponse,
)

__all__ = [
    "BaseSchema",
    "ProviderSchema",
    "WeChatPayCredentials",
    "CheckName",
    "SignType",
    "TransferParams",
    "TransferPayload",
    "QueryTransferParams",
    "QueryTransferPayload",
    "TransferBankParams",
    "TransferBankPayload",
    "QueryTransferBankParams",
    "QueryTransferBankPayload",
    "GetPublicKeyPayload",
    "WeChatPayResult",
    "TransferResponse",
    "QueryTransferResponse",
    "TransferBankResponse",
    "QueryTransferBankResponse",
    "GetPublicKeyResponse",
]
