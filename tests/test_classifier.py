import pytest

from clippocket.clipboard.base import PasteboardKind
from clippocket.clipboard.classifier import (classify, classify_binary,
                                             count_code_indicators,
                                             is_phone_number, link_scheme)
from clippocket.models.clipboarditem import ItemType


@pytest.mark.parametrize("text", [
    "hello@example.com",
    "first.last+tag@mail.example.co.uk",
    "  USER_99@Example.ORG \n",
])
def test_whole_string_email(text):
    assert classify(text) is ItemType.EMAIL


def test_mailto_link_is_email():
    assert classify("mailto:someone@example.com") is ItemType.EMAIL


@pytest.mark.parametrize("text", [
    "https://example.com/path?q=1",
    "http://localhost:8000",
    "ftp://files.example.org/pub",
    "www.python.org",
    "github.com/user/repo",
])
def test_links_are_urls(text):
    assert classify(text) is ItemType.URL


def test_url_with_code_keywords_stays_url():
    assert classify("https://example.com/import/class/function") is ItemType.URL


def test_text_containing_a_url_is_not_a_url():
    assert classify("see https://example.com for details") is ItemType.TEXT


@pytest.mark.parametrize("text", [
    "+1 (555) 123-4567",
    "555-123-4567",
    "020 7946 0958",
    "5551234567",
])
def test_phone_numbers(text):
    assert classify(text) is ItemType.PHONE


@pytest.mark.parametrize("text", ["3.14159265", "192.168.1.1", "2024-01-15", "12345"])
def test_number_like_strings_are_not_phones(text):
    assert not is_phone_number(text)


@pytest.mark.parametrize("text", ['{"a": 1, "b": [1, 2]}', "[1, 2, 3]", "{}"])
def test_json_documents(text):
    assert classify(text) is ItemType.JSON


def test_braces_without_valid_json_are_not_json():
    assert classify("{not json}") is ItemType.TEXT


@pytest.mark.parametrize("text", [
    "#FF00AA", "#fff", "#a1B2c3",
    "rgb(255, 0, 0)", "rgba(0,0,0,0.5)", "hsl(120, 100%, 50%)", "hsla(1, 2%, 3%, 0.4)",
])
def test_colors(text):
    assert classify(text) is ItemType.COLOR


@pytest.mark.parametrize("text", ["#FF00A", "#GGGGGG", "#12345678"])
def test_malformed_hex_is_not_a_color(text):
    assert classify(text) is not ItemType.COLOR


def test_func_with_braces_over_lines_is_code():
    text = "func foo() {\n  return 1\n}"
    assert count_code_indicators(text) >= 2
    assert classify(text) is ItemType.CODE


def test_python_snippet_is_code():
    text = "import os\n\ndef main():\n    print(os.getcwd())\n"
    assert classify(text) is ItemType.CODE


def test_single_indicator_is_not_enough():
    assert classify("I will def not be there") is ItemType.TEXT


def test_control_flow_counts_as_indicator():
    assert classify("if (x > 1) { const y = 2; }") is ItemType.CODE


def test_plain_text():
    assert classify("Remember to buy milk") is ItemType.TEXT


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_input_is_rejected(text):
    assert classify(text) is None


def test_link_scheme_for_unknown_bare_domain():
    assert link_scheme("notes.txt") is None
    assert link_scheme("example.com") == "http"


def test_classify_binary():
    assert classify_binary(PasteboardKind.FILE_URL) is ItemType.FILE
    assert classify_binary(PasteboardKind.IMAGE) is ItemType.IMAGE
    assert classify_binary(PasteboardKind.TEXT) is None
