import pytest
from lxml import etree

from wechat_pay.core.xml_util import from_xml, to_xml
from wechat_pay.schemas import SignType


class TestToXml:
    """Test to_xml function."""

    def test_wraps_fields_in_root(self):
        result = to_xml({"return_code": "SUCCESS", "amount": 100})

        assert result == "<xml><return_code>SUCCESS</return_code><amount>100</amount></xml>"

    def test_custom_root_name(self):
        assert to_xml({"a": "1"}, root_name="request") == "<request><a>1</a></request>"

    def test_reserved_characters_use_cdata(self):
        result = to_xml({"desc": "Tom & Jerry <Co>"})

        assert result == "<xml><desc><![CDATA[Tom & Jerry <Co>]]></desc></xml>"

    def test_cdata_terminator_is_escaped(self):
        result = to_xml({"desc": "a]]>b<"})

        assert "CDATA" not in result
        assert from_xml(result) == {"desc": "a]]>b<"}

    def test_skips_none(self):
        assert to_xml({"a": "1", "b": None}) == "<xml><a>1</a></xml>"

    def test_enum_bool_and_list_values(self):
        result = to_xml({"sign_type": SignType.MD5, "flag": True, "item": ["1", "2"]})

        assert result == (
            "<xml><sign_type>MD5</sign_type><flag>true</flag><item>1</item><item>2</item></xml>"
        )

    def test_nested_mapping(self):
        result = to_xml({"scene_info": {"id": "1", "name": "shop"}})

        assert result == "<xml><scene_info><id>1</id><name>shop</name></scene_info></xml>"


class TestFromXml:
    """Test from_xml function."""

    def test_drops_root_and_reads_cdata(self):
        text = (
            "<xml><return_code><![CDATA[SUCCESS]]></return_code>"
            "<return_msg><![CDATA[OK]]></return_msg></xml>"
        )

        assert from_xml(text) == {"return_code": "SUCCESS", "return_msg": "OK"}

    def test_single_element_stays_scalar(self):
        assert from_xml("<xml><item>1</item></xml>") == {"item": "1"}

    def test_repeated_elements_become_list(self):
        assert from_xml("<xml><item>1</item><item>2</item></xml>") == {"item": ["1", "2"]}

    def test_empty_element_is_empty_string(self):
        assert from_xml("<xml><err_code/></xml>") == {"err_code": ""}

    def test_nested_element_becomes_dict(self):
        result = from_xml("<xml><scene_info><id>1</id></scene_info></xml>")

        assert result == {"scene_info": {"id": "1"}}

    def test_accepts_bytes_with_declaration(self):
        text = '<?xml version="1.0" encoding="UTF-8"?><xml><name>张三</name></xml>'

        assert from_xml(text) == {"name": "张三"}
        assert from_xml(text.encode("utf-8")) == {"name": "张三"}

    def test_malformed_raises(self):
        with pytest.raises(etree.XMLSyntaxError):
            from_xml("<xml><return_code>SUCCESS</xml>")

    def test_empty_input_raises(self):
        with pytest.raises(etree.XMLSyntaxError):
            from_xml("")

    def test_external_entities_are_not_resolved(self, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("top secret")
        text = (
            f'<!DOCTYPE xml [<!ENTITY xxe SYSTEM "file://{secret}">]>'
            "<xml><name>&xxe;</name></xml>"
        )

        result = from_xml(text)

        assert "top secret" not in str(result)


class TestRoundTrip:
    """Test that flat objects survive to_xml then from_xml."""

    def test_flat_object(self, faker_instance):
        obj = {
            "mch_appid": faker_instance.uuid4(),
            "desc": faker_instance.sentence(),
            "re_user_name": "O'Brien & <Sons>",
            "amount": str(faker_instance.random_int()),
        }

        assert from_xml(to_xml(obj)) == obj
