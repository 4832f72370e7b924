from wechat_pay.core.xml_util import from_xml, to_xml
from wechat_pay.services.payments.request import WeChatPayRequest
from wechat_pay.services.payments.wechat_transfer import WeChatTransfer

__all__ = [
    "WeChatTransfer",
    "WeChatPayRequest",
    "from_xml",
    "to_xml",
]
