from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from faker import Faker

from wechat_pay.core.xml_util import to_xml
from wechat_pay.schemas import (
    QueryTransferBankParams,
    QueryTransferParams,
    TransferBankParams,
    TransferParams,
    WeChatPayCredentials,
)
from wechat_pay.services.payments.request import WeChatPayRequest

# ==================== Credentials Fixtures ====================


@pytest.fixture
def wechat_pay_credentials(faker_instance: Faker, tmp_path: Path) -> WeChatPayCredentials:
    """Create mock WeChat Pay merchant credentials."""
    return WeChatPayCredentials(
        mch_id=str(faker_instance.random_int(min=1000000000, max=1999999999)),
        app_id=f"wx{faker_instance.hexify(text='^' * 16)}",
        secret_key=faker_instance.lexify(text="?" * 32),
        cert_path=tmp_path / "apiclient_cert.pem",
        key_path=tmp_path / "apiclient_key.pem",
    )


# ==================== RSA Key Fixtures ====================


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Generate an RSA key pair standing in for the WeChat Pay key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """PEM of the public key in PKCS#1 form, as WeChat Pay issues it."""
    return (
        rsa_private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.PKCS1,
        )
        .decode("utf-8")
    )


@pytest.fixture
def public_key_path(tmp_path: Path) -> Path:
    """Location of the cached public key, not created yet."""
    return tmp_path / "keys" / ".rsa_pub.pem"


# ==================== Request Fixtures ====================


@pytest.fixture
def mock_request() -> Mock:
    """Create mock WeChatPayRequest."""
    mock = Mock(spec=WeChatPayRequest)
    mock.post = AsyncMock()
    mock.close_client = AsyncMock()
    return mock


@pytest.fixture
def xml_transport() -> Callable[..., tuple[httpx.MockTransport, list[httpx.Request]]]:
    """
    Build a MockTransport answering every request with the given fields as XML.

    Returns the transport and the list the sent requests are recorded in.
    """

    def factory(
        fields: dict,
        status_code: int = 200,
    ) -> tuple[httpx.MockTransport, list[httpx.Request]]:
        sent: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(
                status_code,
                content=to_xml(fields).encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )

        return httpx.MockTransport(handler), sent

    return factory


# ==================== Params Fixtures ====================


@pytest.fixture
def sample_partner_trade_no(faker_instance: Faker) -> str:
    """Generate a sample merchant order number."""
    return faker_instance.numerify(text="2018##########")


@pytest.fixture
def transfer_params(faker_instance: Faker, sample_partner_trade_no: str) -> TransferParams:
    return TransferParams(
        partner_trade_no=sample_partner_trade_no,
        openid=f"o{faker_instance.lexify(text='?' * 27)}",
        amount=faker_instance.random_int(min=100, max=10000),
        desc=faker_instance.sentence(nb_words=3),
        spbill_create_ip=faker_instance.ipv4(),
    )


@pytest.fixture
def query_transfer_params(sample_partner_trade_no: str) -> QueryTransferParams:
    return QueryTransferParams(partner_trade_no=sample_partner_trade_no)


@pytest.fixture
def transfer_bank_params(faker_instance: Faker, sample_partner_trade_no: str) -> TransferBankParams:
    return TransferBankParams(
        partner_trade_no=sample_partner_trade_no,
        enc_bank_no=faker_instance.numerify(text="6222############"),
        enc_true_name=faker_instance.name(),
        bank_code="1002",
        amount=faker_instance.random_int(min=100, max=10000),
        desc=faker_instance.sentence(nb_words=3),
    )


@pytest.fixture
def query_transfer_bank_params(sample_partner_trade_no: str) -> QueryTransferBankParams:
    return QueryTransferBankParams(partner_trade_no=sample_partner_trade_no)
