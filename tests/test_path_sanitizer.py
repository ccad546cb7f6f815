from feishu_md.services.path_sanitizer import markdown_filename, sanitize_filename


def test_sanitize_filename_replaces_invalid_chars() -> None:
    result = sanitize_filename('bad:name*"test"?')
    assert ":" not in result
    assert "*" not in result
    assert '"' not in result
    assert "?" not in result


def test_sanitize_filename_collapses_whitespace() -> None:
    assert sanitize_filename("  项目  周报\t2024 ") == "项目_周报_2024"


def test_sanitize_filename_handles_reserved_names() -> None:
    assert sanitize_filename("CON") == "CON_"
    assert sanitize_filename("LPT1") == "LPT1_"


def test_sanitize_filename_strips_trailing_dots_and_spaces() -> None:
    result = sanitize_filename("name. ")
    assert not result.endswith(".")
    assert not result.endswith(" ")


def test_markdown_filename() -> None:
    assert markdown_filename("A/B 测试") == "A_B_测试.md"
    assert markdown_filename("...") == "_.md"
