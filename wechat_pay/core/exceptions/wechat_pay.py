from wechat_pay.core.exceptions.base import AppException


class WeChatPayException(AppException):
    """
    Exception related to WeChat Pay operations
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message, exception)


class WeChatPayClientNotInitializedException(WeChatPayException):
    """
    Exception raised when the WeChat Pay HTTP client is not initialized
    """

    def __init__(
        self,
        message="WeChat Pay client not initialized",
        exception: Exception | None = None,
    ):
        super().__init__(message, exception)


class WeChatPayInvalidCredentialsException(WeChatPayException):
    """
    Exception raised when the merchant credentials are missing or invalid
    """

    def __init__(
        self,
        message="WeChat Pay credentials are invalid",
        exception: Exception | None = None,
    ):
        super().__init__(message, exception)


class WeChatPayCertificateMissingException(WeChatPayException):
    """
    Exception raised when the merchant client certificate cannot be loaded
    """

    def __init__(
        self,
        message="WeChat Pay client certificate is missing or invalid",
        exception: Exception | None = None,
    ):
        super().__init__(message, exception)


class WeChatPayProviderException(WeChatPayException):
    """
    Exception raised when WeChat Pay reports a failure in its response
    """

    def __init__(
        self,
        message="WeChat Pay reported a failure",
        exception: Exception | None = None,
        return_code: str | None = None,
        return_msg: str | None = None,
        err_code: str | None = None,
        err_code_des: str | None = None,
    ):
        super().__init__(message, exception)
        self.return_code = return_code
        self.return_msg = return_msg
        self.err_code = err_code
        self.err_code_des = err_code_des


class WeChatPayMerchantMismatchException(WeChatPayException):
    """
    Exception raised when WeChat Pay answers for a merchant other than the configured one
    """

    def __init__(
        self,
        message="Merchant id returned by WeChat Pay does not match the configured merchant id",
        exception: Exception | None = None,
    ):
        super().__init__(message, exception)


class WeChatPayEncryptionException(WeChatPayException):
    """
    Exception raised when a field cannot be encrypted with the RSA public key
    """

    def __init__(
        self,
        message="Failed to encrypt field with WeChat Pay public key",
        exception: Exception | None = None,
    ):
        super().__init__(message, exception)
