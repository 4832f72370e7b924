import hashlib
import hmac
import secrets
import string
from collections.abc import Mapping
from typing import Any

from wechat_pay.core.constants import NONCE_LENGTH
from wechat_pay.schemas import SignType

NONCE_ALPHABET = string.ascii_letters + string.digits


def generate_nonce_str(length: int = NONCE_LENGTH) -> str:
    """
    Generate a random nonce string for WeChat Pay requests

    Args:
        length (int): Number of characters, WeChat Pay accepts up to 32

    Returns:
        str: Random alphanumeric string
    """
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))


def build_sign_string(data: Mapping[str, Any], secret_key: str) -> str:
    """
    Build the string WeChat Pay signs.

    Non-empty fields except "sign" are sorted by name and joined as
    key=value pairs with "&", then "&key=<secret_key>" is appended.

    Args:
        data (Mapping[str, Any]): Request or response fields
        secret_key (str): Merchant API secret key

    Returns:
        str: The string to sign
    """
    pairs = [
        f"{key}={value}"
        for key, value in sorted(data.items())
        if key != "sign" and value is not None and value != ""
    ]
    pairs.append(f"key={secret_key}")

    return "&".join(pairs)


def calculate_signature(
    data: Mapping[str, Any],
    secret_key: str,
    sign_type: SignType | str = SignType.MD5,
) -> str:
    """
    Calculate a WeChat Pay signature

    Args:
        data (Mapping[str, Any]): Fields to sign
        secret_key (str): Merchant API secret key
        sign_type (SignType | str): HMAC-SHA256, anything else signs with MD5

    Returns:
        str: Upper-case hexadecimal signature
    """
    sign_string = build_sign_string(data, secret_key).encode("utf-8")

    if sign_type == SignType.HMAC_SHA256:
        digest = hmac.new(secret_key.encode("utf-8"), sign_string, hashlib.sha256).hexdigest()
    else:
        digest = hashlib.md5(sign_string).hexdigest()

    return digest.upper()


def verify_signature(data: Mapping[str, Any], secret_key: str) -> bool:
    """
    Check the signature WeChat Pay attached to a response

    Args:
        data (Mapping[str, Any]): Parsed response fields, including "sign"
        secret_key (str): Merchant API secret key

    Returns:
        bool: True if "sign" is present and matches
    """
    sign = data.get("sign")
    if not sign:
        return False

    sign_type = data.get("sign_type", SignType.MD5)
    expected = calculate_signature(data, secret_key, sign_type)

    return hmac.compare_digest(expected, str(sign))
