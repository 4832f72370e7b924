import base64
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from loguru import logger
from pydantic import ValidationError

from wechat_pay.core.config import settings
from wechat_pay.core.constants import PUBLIC_KEY_FILE_NAME, WeChatPayCode, WeChatPayPath
from wechat_pay.core.exceptions.wechat_pay import (
    WeChatPayEncryptionException,
    WeChatPayInvalidCredentialsException,
    WeChatPayMerchantMismatchException,
    WeChatPayProviderException,
)
from wechat_pay.schemas import (
    GetPublicKeyResponse,
    QueryTransferBankParams,
    QueryTransferBankResponse,
    QueryTransferParams,
    QueryTransferResponse,
    TransferBankParams,
    TransferBankResponse,
    TransferParams,
    TransferResponse,
    WeChatPayCredentials,
)
from wechat_pay.services.payments.builders import (
    build_get_public_key_payload,
    build_query_transfer_bank_payload,
    build_query_transfer_payload,
    build_transfer_bank_payload,
    build_transfer_payload,
)
from wechat_pay.services.payments.public_key import PublicKeyCache
from wechat_pay.services.payments.request import WeChatPayRequest


class WeChatTransfer:
    """
    WeChat Pay enterprise payment client.

    Pays out to a user's WeChat wallet or to a bank card and queries both
    kinds of transfer. Bank card number and holder name are RSA encrypted
    with a public key issued by WeChat Pay, fetched once and cached on disk.

    Responses are returned as WeChat Pay sends them, business failures
    (result_code FAIL) included. A return_code FAIL raises
    WeChatPayProviderException.
    """

    def __init__(
        self,
        credentials: WeChatPayCredentials | None = None,
        request: WeChatPayRequest | None = None,
        public_key_path: Path | None = None,
    ) -> None:
        """
        Initialize the transfer client.

        Args:
            credentials: Merchant credentials, read from settings if omitted
            request: Request utility, built from the credentials if omitted
            public_key_path: File caching the RSA public key

        Raises:
            WeChatPayInvalidCredentialsException: If settings hold no valid credentials
            WeChatPayCertificateMissingException: If the client certificate cannot be loaded
        """
        try:
            self._credentials = credentials or settings.wechat_pay_credentials
        except ValidationError as err:
            logger.exception("Invalid WeChat Pay credentials in settings")
            raise WeChatPayInvalidCredentialsException("Invalid WeChat Pay credentials") from err

        if public_key_path is None:
            file_name = PUBLIC_KEY_FILE_NAME.format(mch_id=self._credentials.mch_id)
            public_key_path = settings.public_key_dir / file_name

        self._request = request or WeChatPayRequest(self._credentials)
        self._public_key_cache = PublicKeyCache(path=public_key_path, fetch=self._fetch_public_key)
        logger.info(f"WeChat Pay transfer client initialized: {self._credentials.mch_id}")

    @property
    def credentials(self) -> WeChatPayCredentials:
        return self._credentials

    @property
    def public_key_path(self) -> Path:
        return self._public_key_cache.path

    async def close_client(self) -> None:
        """
        Close the underlying HTTP client.
        """
        await self._request.close_client()

    async def transfer_to_wallet(self, params: TransferParams) -> TransferResponse:
        """
        Pay out to a user's WeChat wallet.

        Example:
            >>> transfer = WeChatTransfer()
            >>> res = await transfer.transfer_to_wallet(
            ...     TransferParams(
            ...         partner_trade_no="201811011926123",
            ...         openid="oxTWIuGaIt6gTKsQRLau2M0yL16E",
            ...         amount=100,
            ...         desc="Refund",
            ...     )
            ... )
            >>> print(res.payment_no)

        Args:
            params: Transfer parameters, amount in fen

        Returns:
            TransferResponse: WeChat Pay response

        Raises:
            WeChatPayProviderException: If WeChat Pay answers with return_code FAIL
        """
        logger.info(f"Transferring to wallet: {params.partner_trade_no}, amount: {params.amount}")

        payload = build_transfer_payload(params, self._credentials)

        return await self._request.post(
            settings.api_base_url.with_path(WeChatPayPath.TRANSFER),
            payload,
            TransferResponse,
        )

    async def query_wallet_transfer(self, params: QueryTransferParams) -> QueryTransferResponse:
        """
        Query a transfer to a user's WeChat wallet.

        Args:
            params: Query parameters

        Returns:
            QueryTransferResponse: WeChat Pay response

        Raises:
            WeChatPayProviderException: If WeChat Pay answers with return_code FAIL
        """
        logger.info(f"Querying wallet transfer: {params.partner_trade_no}")

        payload = build_query_transfer_payload(params, self._credentials)

        return await self._request.post(
            settings.api_base_url.with_path(WeChatPayPath.QUERY_TRANSFER),
            payload,
            QueryTransferResponse,
        )

    async def transfer_to_bank(self, params: TransferBankParams) -> TransferBankResponse:
        """
        Pay out to a bank card.

        The card number and holder name are encrypted with the WeChat Pay
        public key, which is fetched first if it is not cached yet.

        Args:
            params: Transfer parameters, card number and holder name in plain text

        Returns:
            TransferBankResponse: WeChat Pay response

        Raises:
            WeChatPayProviderException: If the key fetch or the transfer fails with return_code FAIL
            WeChatPayMerchantMismatchException: If the key was issued for another merchant
            WeChatPayEncryptionException: If the public key is unusable
        """
        logger.info(f"Transferring to bank: {params.partner_trade_no}, amount: {params.amount}")

        payload = build_transfer_bank_payload(
            params,
            self._credentials,
            enc_bank_no=await self.encrypt(params.enc_bank_no),
            enc_true_name=await self.encrypt(params.enc_true_name),
        )

        return await self._request.post(
            settings.api_base_url.with_path(WeChatPayPath.TRANSFER_BANK),
            payload,
            TransferBankResponse,
        )

    async def query_bank_transfer(
        self,
        params: QueryTransferBankParams,
    ) -> QueryTransferBankResponse:
        """
        Query a transfer to a bank card.

        Args:
            params: Query parameters

        Returns:
            QueryTransferBankResponse: WeChat Pay response

        Raises:
            WeChatPayProviderException: If WeChat Pay answers with return_code FAIL
        """
        logger.info(f"Querying bank transfer: {params.partner_trade_no}")

        payload = build_query_transfer_bank_payload(params, self._credentials)

        return await self._request.post(
            settings.api_base_url.with_path(WeChatPayPath.QUERY_TRANSFER_BANK),
            payload,
            QueryTransferBankResponse,
        )

    async def encrypt(self, text: str) -> str:
        """
        Encrypt a value with the WeChat Pay RSA public key.

        Uses RSA OAEP padding with SHA-1, as required for bank card fields.

        Args:
            text: Plain text value

        Returns:
            str: Base64 encoded cipher text

        Raises:
            WeChatPayEncryptionException: If the key cannot be loaded or the value is too long
        """
        pem = await self.get_public_key()

        try:
            public_key = serialization.load_pem_public_key(pem.encode("utf-8"))
            if not isinstance(public_key, rsa.RSAPublicKey):
                raise ValueError(f"Expected an RSA public key, got {type(public_key).__name__}")

            encrypted = public_key.encrypt(
                text.encode("utf-8"),
                padding.OAEP(
                    mgf=padding.MGF1(algorithm=hashes.SHA1()),
                    algorithm=hashes.SHA1(),
                    label=None,
                ),
            )
        except (ValueError, UnsupportedAlgorithm) as err:
            logger.exception(f"Failed to encrypt with WeChat Pay public key {self.public_key_path}")
            raise WeChatPayEncryptionException(
                "Failed to encrypt field with WeChat Pay public key"
            ) from err

        return base64.b64encode(encrypted).decode("ascii")

    async def get_public_key(self) -> str:
        """
        Get the WeChat Pay RSA public key.

        The key is read from memory or the cache file, and fetched from
        WeChat Pay only when neither has it. A cached key is never
        expired. If WeChat Pay rotates its key, call
        clear_public_key_cache() to fetch the new one.

        Returns:
            str: PEM encoded public key

        Raises:
            WeChatPayProviderException: If WeChat Pay reports a failure
            WeChatPayMerchantMismatchException: If the key was issued for another merchant
        """
        return await self._public_key_cache.get()

    async def clear_public_key_cache(self) -> None:
        """
        Forget the cached public key so the next encryption fetches it again.
        """
        await self._public_key_cache.clear()

    async def _fetch_public_key(self) -> str:
        res = await self._request.post(
            settings.risk_api_base_url.with_path(WeChatPayPath.GET_PUBLIC_KEY),
            build_get_public_key_payload(self._credentials),
            GetPublicKeyResponse,
        )

        if res.return_code == WeChatPayCode.SUCCESS and res.result_code == WeChatPayCode.SUCCESS:
            if res.mch_id != self._credentials.mch_id:
                logger.error(
                    f"Merchant id mismatch fetching public key. "
                    f"Expected: {self._credentials.mch_id}, Got: {res.mch_id}"
                )
                raise WeChatPayMerchantMismatchException(
                    f"Public key issued for merchant '{res.mch_id}', "
                    f"but the configured merchant is '{self._credentials.mch_id}'"
                )

            if not res.pub_key:
                raise WeChatPayProviderException(
                    "WeChat Pay returned no public key",
                    return_code=res.return_code,
                    return_msg=res.return_msg,
                )

            logger.info(f"WeChat Pay public key fetched for merchant {res.mch_id}")
            return res.pub_key

        message = res.return_msg if res.return_code == WeChatPayCode.FAIL else res.err_code_des
        logger.error(f"Failed to fetch WeChat Pay public key: {message}")
        raise WeChatPayProviderException(
            message or "Failed to fetch WeChat Pay public key",
            return_code=res.return_code,
            return_msg=res.return_msg,
            err_code=res.err_code,
            err_code_des=res.err_code_des,
        )
