import pytest

app = pytest.importorskip("app", exc_type=ImportError)


def test_format_breaks_every_forty_chars():
    text = "A" * 95
    lines = app.format_for_display(text).split("\n")
    assert [len(line) for line in lines] == [40, 40, 15]


def test_format_short_and_empty():
    assert app.format_for_display("abc") == "abc"
    assert app.format_for_display("") == ""
    assert app.format_for_display("a" * 40) == "a" * 40


def test_format_rejects_bad_width():
    with pytest.raises(ValueError):
        app.format_for_display("abc", width=0)
