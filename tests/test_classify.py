from ssh_config_editor.core.parser import (
    BlankLine,
    CommentLine,
    Directive,
    MalformedLine,
    classify_line,
    physical_lines,
)


def test_comment_keeps_original_text():
    line = classify_line("   # keep my indent")
    assert isinstance(line, CommentLine)
    assert line.text == "   # keep my indent"


def test_blank_and_whitespace_only():
    assert isinstance(classify_line(""), BlankLine)
    assert isinstance(classify_line(" \t "), BlankLine)


def test_directive_splits_on_first_whitespace_run():
    line = classify_line("  ProxyCommand   ssh -W %h:%p bastion  ")
    assert isinstance(line, Directive)
    assert line.key == "ProxyCommand"
    assert line.value == "ssh -W %h:%p bastion"


def test_directive_key_case_is_kept():
    line = classify_line("HOST Web")
    assert line.key == "HOST"
    assert line.keyword == "host"


def test_keyword_without_value_is_malformed():
    assert isinstance(classify_line("ForwardAgent"), MalformedLine)
    assert isinstance(classify_line("  Host   "), MalformedLine)


def test_physical_lines_strip_carriage_returns():
    assert physical_lines("a\r\nb\n\nc") == ["a", "b", "", "c"]
    assert physical_lines("") == []
    assert physical_lines("only\n") == ["only"]
