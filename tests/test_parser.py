"""
Grammar acceptance and rejection tests for the Spoon parser.
"""

import pytest

from spoon.src.spoon_errors import SpoonSyntaxError
from spoon.src.spoon_parser import SpoonParser


@pytest.fixture(scope="module")
def parser():
    return SpoonParser()


def accepts(parser, start, code):
    try:
        parser.parse(code, start=start)
    except SpoonSyntaxError:
        return False
    return True


@pytest.mark.parametrize("code", ["a.b.c", "a().b().c(d, e).f"])
def test_chain_accepts(parser, code):
    assert accepts(parser, "chain", code)


def test_chain_rejects(parser):
    assert not accepts(parser, "chain", "a b.c")


@pytest.mark.parametrize("code", ["a-b-c", "abcdef", "a"])
def test_name_accepts(parser, code):
    assert accepts(parser, "name", code)


@pytest.mark.parametrize("code", ["ab=", "a2b", "ab_cd"])
def test_name_rejects(parser, code):
    assert not accepts(parser, "name", code)


@pytest.mark.parametrize("code", ["123456789", "1.2"])
def test_number_accepts(parser, code):
    assert accepts(parser, "number", code)


def test_number_rejects(parser):
    assert not accepts(parser, "number", "a2")


@pytest.mark.parametrize("code", ["# comment", "#comment"])
def test_comment_is_a_single_token(parser, code):
    assert [token.type for token in parser.lex(code)] == ["COMMENT"]


def test_comment_ends_at_newline(parser):
    tokens = [token.type for token in parser.lex("# comment\n expression")]
    assert tokens != ["COMMENT"]
    assert "NAME" in tokens


def test_comment_is_ignored_by_parser(parser):
    assert accepts(parser, "root", "x = 1 # set x\n# done")


@pytest.mark.parametrize("code", ["if (something) anything", "if (a) b else if (c) d else e"])
def test_condition_accepts(parser, code):
    assert accepts(parser, "condition", code)


@pytest.mark.parametrize("code", ["if a b c", "if (something) a b"])
def test_condition_rejects(parser, code):
    assert not accepts(parser, "condition", code)


def test_unless_is_a_condition(parser):
    assert accepts(parser, "condition", "unless (done) work() else rest()")


@pytest.mark.parametrize("code", [
    "def test() it",
    "def test it",
    "def test(me = 1) it",
    "def test me = 2 it",
])
def test_function_accepts(parser, code):
    assert accepts(parser, "function", code)


@pytest.mark.parametrize("code", ["def test() me it", "def test me it he"])
def test_function_rejects(parser, code):
    assert not accepts(parser, "function", code)


def test_function_typed_parameters(parser):
    assert accepts(parser, "function", "def add(a: Int, b: Int = 2) a + b")


@pytest.mark.parametrize("code", [
    "(a, b) -> a + b",
    "-> 1",
    "() => x",
    "a -> a",
    "a, b -> a + b",
    "a = 1 -> a",
    "a: Int, b -> a",
    "(a): Int -> a",
    ": Int => 1",
])
def test_closure_accepts(parser, code):
    assert accepts(parser, "closure", code)


@pytest.mark.parametrize("code", ["1 -> a", "(a) b -> a", "a b -> a"])
def test_closure_rejects(parser, code):
    assert not accepts(parser, "closure", code)


@pytest.mark.parametrize("code", [
    "x = 1",
    "x += 1",
    "x or= y",
    "a == b",
    "a or b",
    "!a",
    "i++",
    "new Point(1, 2)",
    "[1, 2, 3]",
    "'single'",
    '"double"',
    '"hello #{name}!"',
    "true",
    "for (i) work()",
    "while (running) step()",
    "until (done) step()",
    "{a: 1, 'b': 2}",
    "{}",
    "a[0]",
    "f(x)[i][j]",
    "@x",
    "@@count",
    "@x = 1",
    "x: Int = 1",
    "ifdef (flash) a else b",
    "\"#{a} #{b}\"",
    "\"\\#{a}\"",
])
def test_expression_accepts(parser, code):
    assert accepts(parser, "expression", code)


def test_expression_is_flat(parser):
    assert not accepts(parser, "expression", "a + b * c")


def test_root_statements(parser):
    code = "import haxe.io.Path\n\nprint 'hello'\nx = 1\nreturn x, y\n"
    assert accepts(parser, "root", code)


def test_root_empty(parser):
    assert accepts(parser, "root", "")


@pytest.mark.parametrize("code", [
    "class Point\n  x = 1\n",
    "class Point extends Base\n  def norm\n    x\n",
    "@:keep\ndef main() 1\n",
    "@:native('Point')\nclass Point\n  x = 1\n",
    "if (a)\n  b\nelse\n  c\n",
])
def test_root_declarations(parser, code):
    assert accepts(parser, "root", code)


def test_class_name_is_a_type(parser):
    assert not accepts(parser, "root", "class point\n  x = 1\n")


def test_block_needs_a_statement(parser):
    # A block holding only comments is rejected, not read as empty
    assert not accepts(parser, "root", "def f\n  # nothing yet\nx = 1\n")


def test_nested_blocks(parser):
    code = (
        "def main\n"
        "  x = 1\n"
        "  if (x)\n"
        "    print x\n"
        "  else\n"
        "    print 0\n"
        "  return x\n"
        "main()\n"
    )
    assert accepts(parser, "root", code)


def test_inconsistent_dedent(parser):
    with pytest.raises(SpoonSyntaxError):
        parser.parse("def main\n    x = 1\n  y = 2\n")


def test_unexpected_indent(parser):
    assert not accepts(parser, "root", "x = 1\n  y = 2")


def test_syntax_error_details(parser):
    with pytest.raises(SpoonSyntaxError) as info:
        parser.parse("x = )")

    error = info.value
    assert error.line == 1
    assert error.column == 5
    assert "NAME" in error.expected
    assert "line 1, column 5" in str(error)


def test_syntax_error_at_end_of_input(parser):
    with pytest.raises(SpoonSyntaxError) as info:
        parser.parse("x =")

    assert info.value.line is None
    assert "end of input" in str(info.value)


def test_unexpected_character(parser):
    with pytest.raises(SpoonSyntaxError) as info:
        parser.parse("x = $")

    assert info.value.line == 1
    assert "'$'" in str(info.value)
