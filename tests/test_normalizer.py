import pytest

from v2ex_scraper.normalizer import normalize_fragment


def test_normalize_missing_fragment_is_empty():
    assert normalize_fragment(None) == ""
    assert normalize_fragment("") == ""


def test_normalize_line_breaks_become_newlines():
    fragment = "line one<br>line two<BR/>line three<br />end"

    assert normalize_fragment(fragment) == "line one\nline two\nline three\nend"


def test_normalize_drops_tags_and_keeps_inline_spacing():
    fragment = "  <b>bold</b>   text  <a href='https://v2ex.com'>link</a>  "

    assert normalize_fragment(fragment) == "bold   text  link"


def test_normalize_decodes_entities():
    fragment = "a&nbsp;b &lt;tag&gt; &quot;q&quot; &amp; c"

    assert normalize_fragment(fragment) == 'a b <tag> "q" & c'


def test_normalize_decodes_ampersand_last():
    assert normalize_fragment("&amp;lt;") == "&lt;"


def test_normalize_trims_only_the_edges():
    fragment = "\n\n  hello<br><br>  world  \n"

    assert normalize_fragment(fragment) == "hello\n\n  world"


@pytest.mark.parametrize(
    "fragment",
    [
        "plain text",
        "multi<br>line",
        "<p>para</p> text",
        "  spaced   out  ",
    ],
)
def test_normalize_is_idempotent_on_its_output(fragment):
    once = normalize_fragment(fragment)

    assert normalize_fragment(once) == once
