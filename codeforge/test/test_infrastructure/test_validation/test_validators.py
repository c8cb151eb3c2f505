from codeforge.infrastructure.validation.validators import (
    BraceLanguageValidator,
    CodeValidator,
    PythonValidator,
)
from codeforge.infrastructure.validation.validators.base import line_of


def test_count_unbalanced():
    assert CodeValidator.count_unbalanced("f(a[0]) { }") == ""
    assert CodeValidator.count_unbalanced("f(a[0) }") == ")"
    assert CodeValidator.count_unbalanced("{ (") == "("


def test_brace_validator_ignores_strings_and_comments():
    code = (
        "export const label = '{ not a brace';\n"
        "// stray ) in a comment\n"
        "/* and ] here */\n"
        "const tpl = `${label} }`;\n"
    )
    result = BraceLanguageValidator().run_delimiter_check(code)
    assert result.passed


def test_brace_validator_declarations():
    validator = BraceLanguageValidator()
    assert validator.run_declaration_check("export default function A() {}").passed
    assert validator.run_declaration_check("module.exports = {}").passed
    assert validator.run_declaration_check("<template><div/></template>").passed
    assert not validator.run_declaration_check("just some words").passed


def test_python_validator():
    validator = PythonValidator()
    assert validator.run_declaration_check("x = 1\n").passed
    assert validator.run_declaration_check("async def go():\n    pass\n").passed
    assert not validator.run_declaration_check("print('hi')\n").passed

    assert validator.run_delimiter_check("def f():\n    return 1\n").passed
    broken = validator.run_delimiter_check("def f(:\n")
    assert not broken.passed
    assert broken.line == 1


def test_line_of():
    assert line_of("a\nb\nc", 0) == 1
    assert line_of("a\nb\nc", 4) == 3
