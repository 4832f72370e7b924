class WeChatPayPath:
    """
    Endpoint paths of the WeChat Pay enterprise payment API.

    Merchant API paths are resolved against settings.api_base_url,
    the public key path against settings.risk_api_base_url.
    """

    # Enterprise payment to a user's wallet
    TRANSFER = "/mmpaymkttransfers/promotion/transfers"
    QUERY_TRANSFER = "/mmpaymkttransfers/gettransferinfo"

    # Enterprise payment to a bank card
    TRANSFER_BANK = "/mmpaysptrans/pay_bank"
    QUERY_TRANSFER_BANK = "/mmpaysptrans/query_bank"

    # RSA public key used to encrypt bank card fields
    GET_PUBLIC_KEY = "/risk/getpublickey"


class WeChatPayCode:
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


NONCE_LENGTH = 32
PUBLIC_KEY_FILE_NAME = ".rsa_pub_{mch_id}.pem"
