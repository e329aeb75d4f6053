from chrono_mcp.preprocess import normalize_unicode, preprocess


def test_offset_preserving_keeps_length() -> None:
    raw = "  Ｍａｒｃｈ １５ – ３ｐｍ　ＪＳＴ  "
    out = preprocess(raw)
    assert len(out) == len(raw)
    assert out == "  March 15 - 3pm JST  "


def test_fullwidth_to_halfwidth() -> None:
    assert normalize_unicode("１５：３０") == "15:30"
    assert normalize_unicode("ｔｏｍｏｒｒｏｗ") == "tomorrow"


def test_dash_normalization() -> None:
    assert normalize_unicode("9am–5pm") == "9am-5pm"
    assert normalize_unicode("Mon～Fri") == "Mon-Fri"
    assert normalize_unicode("Mon~Fri") == "Mon-Fri"


def test_space_normalization() -> None:
    assert normalize_unicode("5 pm") == "5 pm"
    assert normalize_unicode("at\t9") == "at 9"
