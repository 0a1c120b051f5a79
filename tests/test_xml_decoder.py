import pytest

from webmaster_cli.errors import MalformedDocument
from webmaster_cli.xml_decoder import XMLNode, as_list, decode, normalize_name


def test_single_element_keeps_text_and_attributes_verbatim():
    result = decode('<price currency="EUR" listPrice="0012.50">0012.50</price>')

    node = result["price"]
    assert node.value == "0012.50"
    assert node.attributes == {"currency": "EUR", "list_price": "0012.50"}


def test_true_and_false_text_become_booleans():
    result = decode("<flags><on>true</on><off>false</off><other>True</other><one>1</one></flags>")

    children = result["flags"].children
    assert children["on"].value is True
    assert children["off"].value is False
    assert children["other"].value == "True"
    assert children["one"].value == "1"


def test_attribute_values_are_never_coerced():
    node = decode('<method in-use="true"/>')["method"]
    assert node.attributes == {"in_use": "true"}


def test_repeated_siblings_become_ordered_list():
    feed = decode("<feed><entry>A</entry><entry>B</entry><entry>C</entry></feed>")["feed"]

    entries = feed.children["entry"]
    assert isinstance(entries, list)
    assert [entry.value for entry in entries] == ["A", "B", "C"]


def test_single_child_is_not_wrapped_in_list():
    feed = decode("<feed><entry>A</entry></feed>")["feed"]

    assert isinstance(feed.children["entry"], XMLNode)
    assert feed.children["entry"].value == "A"
    assert feed.child_list("entry")[0].value == "A"


def test_interleaved_siblings_keep_document_order_per_name():
    feed = decode("<feed><entry>A</entry><id>x</id><entry>B</entry></feed>")["feed"]

    assert [entry.value for entry in feed.children["entry"]] == ["A", "B"]
    assert feed.child_value("id") == "x"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("wt:crawlType", "wt:crawl_type"),
        ("preferred-domain", "preferred_domain"),
        ("openSearch:totalResults", "open_search:total_results"),
        ("wt:sitemap-url-count", "wt:sitemap_url_count"),
        ("entry", "entry"),
    ],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


def test_namespaced_elements_are_normalized():
    doc = decode(
        "<entry xmlns:wt='http://schemas.google.com/webmasters/tools/2007'>"
        "<wt:crawlType>web</wt:crawlType></entry>"
    )

    assert doc["entry"].child_value("wt:crawl_type") == "web"


def test_namespace_declarations_are_not_attributes():
    doc = decode("<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005' gd:etag='W/1'/>")

    assert doc["feed"].attributes == {"gd:etag": "W/1"}


def test_value_is_direct_text_only():
    node = decode("<a>x<b>y</b></a>")["a"]

    assert node.value == "x"
    assert node.child_value("b") == "y"


def test_empty_element_has_empty_value_and_no_attributes_or_children():
    node = decode("<empty/>")["empty"]

    assert node.value == ""
    assert node.attributes == {}
    assert node.children == {}
    assert node.to_dict() == {"name": "empty", "value": ""}


def test_to_dict_includes_present_attributes_and_children():
    node = decode('<feed etag="1"><entry>A</entry><entry>B</entry></feed>')["feed"]

    assert node.to_dict() == {
        "name": "feed",
        "value": "",
        "attributes": {"etag": "1"},
        "children": {
            "entry": [
                {"name": "entry", "value": "A"},
                {"name": "entry", "value": "B"},
            ]
        },
    }


def test_entities_are_unescaped():
    assert decode("<a>&lt;meta /&gt; &amp; more</a>")["a"].value == "<meta /> & more"


def test_accessors_on_missing_children():
    node = decode("<a/>")["a"]

    assert node.child("missing") is None
    assert node.child_list("missing") == []
    assert node.child_value("missing", "default") == "default"
    assert node.attribute("missing") is None
    assert as_list(None) == []


@pytest.mark.parametrize(
    "bad",
    [
        "",
        "<feed>",
        "<a><b></a>",
        "not xml at all",
        '<!DOCTYPE a [<!ENTITY e "x">]><a>&e;</a>',
        "<a>\ud800</a>",
    ],
)
def test_malformed_documents_raise(bad):
    with pytest.raises(MalformedDocument):
        decode(bad)
