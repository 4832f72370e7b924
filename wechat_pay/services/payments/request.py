import ssl
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel
from yarl import URL

from wechat_pay.core.constants import WeChatPayCode
from wechat_pay.core.exceptions.wechat_pay import (
    WeChatPayCertificateMissingException,
    WeChatPayClientNotInitializedException,
    WeChatPayProviderException,
)
from wechat_pay.core.logger import request_id_var
from wechat_pay.core.utils import calculate_signature, generate_nonce_str, verify_signature
from wechat_pay.core.xml_util import from_xml, to_xml
from wechat_pay.schemas import SignType, WeChatPayCredentials, WeChatPayResult

ResponseT = TypeVar("ResponseT", bound=WeChatPayResult)


class WeChatPayRequest:
    """
    Signed XML round-trips to WeChat Pay over a mutually authenticated TLS channel.

    Every request carries the merchant client certificate, a fresh nonce and
    a signature. Responses are parsed from XML (or JSON) and validated into
    the requested schema. Transport errors are logged and re-raised as is,
    a response with return_code FAIL raises WeChatPayProviderException.
    """

    def __init__(
        self,
        credentials: WeChatPayCredentials,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the request utility.

        Args:
            credentials: Merchant credentials used for signing and mutual TLS
            client: Preconfigured HTTP client, built from the credentials if omitted

        Raises:
            WeChatPayCertificateMissingException: If the client certificate cannot be loaded
        """
        self._credentials = credentials
        self._client: httpx.AsyncClient | None = client or self.create_client(credentials)

    @property
    def client(self) -> httpx.AsyncClient:
        """
        Get the HTTP client.

        Raises:
            WeChatPayClientNotInitializedException: If the client was closed
        """
        if self._client is None:
            raise WeChatPayClientNotInitializedException("WeChat Pay HTTP client not initialized")

        return self._client

    @staticmethod
    def create_ssl_context(credentials: WeChatPayCredentials) -> ssl.SSLContext:
        """
        Build a TLS context presenting the merchant client certificate.

        Args:
            credentials: Merchant credentials holding the certificate and key paths

        Returns:
            ssl.SSLContext: Context verifying the server and presenting the client certificate

        Raises:
            WeChatPayCertificateMissingException: If the files are missing or invalid
        """
        context = ssl.create_default_context()

        try:
            context.load_cert_chain(
                certfile=credentials.cert_path,
                keyfile=credentials.key_path,
                password=credentials.key_password,
            )
        except FileNotFoundError as err:
            logger.exception(f"WeChat Pay client certificate not found: {credentials.cert_path}")
            raise WeChatPayCertificateMissingException(
                "WeChat Pay client certificate file not found"
            ) from err
        except ssl.SSLError as err:
            logger.exception("Invalid WeChat Pay client certificate")
            raise WeChatPayCertificateMissingException(
                "Invalid WeChat Pay client certificate"
            ) from err

        return context

    @classmethod
    def create_client(cls, credentials: WeChatPayCredentials) -> httpx.AsyncClient:
        return httpx.AsyncClient(verify=cls.create_ssl_context(credentials))

    async def close_client(self) -> None:
        """
        Close the HTTP client and release its connections.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("WeChat Pay HTTP client closed successfully")

    def prepare_payload(self, payload: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
        """
        Turn a payload into the signed fields sent on the wire.

        A nonce is added when missing. sign_type "no_sign_type" signs with
        MD5 and leaves sign_type out of the request.

        Args:
            payload: Request schema or mapping of provider fields

        Returns:
            dict: Fields including nonce_str and sign
        """
        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json", exclude_none=True)
        else:
            data = {key: value for key, value in payload.items() if value is not None}

        data.pop("sign", None)
        if not data.get("nonce_str"):
            data["nonce_str"] = generate_nonce_str()

        sign_type = data.get("sign_type", SignType.MD5)
        if sign_type == SignType.NO_SIGN_TYPE:
            del data["sign_type"]
            sign_type = SignType.MD5

        data["sign"] = calculate_signature(data, self._credentials.secret_key, sign_type)

        return data

    @staticmethod
    def parse_response(response: httpx.Response) -> dict[str, Any]:
        """
        Parse a WeChat Pay response body.

        Raises:
            lxml.etree.XMLSyntaxError: If an XML body is malformed
            json.JSONDecodeError: If a JSON body is malformed
        """
        if "json" in response.headers.get("content-type", ""):
            return response.json()

        return from_xml(response.content)

    async def post(
        self,
        url: str | URL,
        payload: BaseModel | Mapping[str, Any],
        response_model: type[ResponseT],
    ) -> ResponseT:
        """
        Sign and POST a payload, then parse the response.

        Example:
            >>> request = WeChatPayRequest(credentials)
            >>> res = await request.post(
            ...     "https://api.mch.weixin.qq.com/mmpaysptrans/query_bank",
            ...     {"mch_id": "1900000109", "partner_trade_no": "201811011926123"},
            ...     QueryTransferBankResponse,
            ... )
            >>> print(res.status)

        Args:
            url: Endpoint URL
            payload: Request schema or mapping of provider fields
            response_model: Schema the response is validated into

        Returns:
            ResponseT: The response, business failures (result_code FAIL) included

        Raises:
            WeChatPayProviderException: If WeChat Pay answers with return_code FAIL
            httpx.HTTPError: On TLS, connection or HTTP status errors
            lxml.etree.XMLSyntaxError: If the response body is malformed
        """
        data = self.prepare_payload(payload)
        token = request_id_var.set(data["nonce_str"][:8])

        try:
            logger.info(f"Sending WeChat Pay request: {url}")

            response = await self.client.post(
                str(url),
                content=to_xml(data).encode("utf-8"),
                headers={"Content-Type": "text/xml; charset=utf-8"},
            )
            response.raise_for_status()

            result = self.parse_response(response)

            if result.get("return_code") == WeChatPayCode.FAIL:
                logger.error(f"WeChat Pay request failed: {result.get('return_msg')}")
                raise WeChatPayProviderException(
                    result.get("return_msg") or "WeChat Pay reported a failure",
                    return_code=result.get("return_code"),
                    return_msg=result.get("return_msg"),
                    err_code=result.get("err_code"),
                    err_code_des=result.get("err_code_des"),
                )

            if result.get("sign") and not verify_signature(result, self._credentials.secret_key):
                logger.warning(f"WeChat Pay response signature mismatch: {url}")

            logger.info(
                f"WeChat Pay response received: {url}, "
                f"return_code: {result.get('return_code')}, "
                f"result_code: {result.get('result_code')}"
            )

            return response_model.model_validate(result)
        except httpx.HTTPError:
            logger.exception(f"WeChat Pay request transport error: {url}")
            raise
        finally:
            request_id_var.reset(token)
