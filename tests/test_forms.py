import pytest

from shellforms import InvalidIdentifier, StructuralError, render
from shellforms import nodes as n
from shellforms.compiler import is_special_form

# === Conditionals =============================================================


def test_if_logical_test(script):
    assert script('(if (== a b) (echo "ok"))') == (
        r'if [ \( "a" == "b" \) ]; then echo ok;fi'
    )


def test_if_else(script):
    assert script('(if (file-exists? "/tmp") (echo ok) (echo no))') == (
        "if [ -e /tmp ]; then echo ok;else echo no;fi"
    )


def test_if_command_test(script):
    assert script("(if foo (echo ok))") == "if foo; then echo ok;fi"


def test_if_nil_else_is_omitted(script):
    assert script("(if a (echo 1) nil)") == "if a; then echo 1;fi"


def test_if_compound_body(script):
    assert script("(if a (do (echo 1) (echo 2)))") == (
        "if a; then\necho 1\necho 2\nfi"
    )


def test_if_nested_if(script):
    assert script("(if a (echo 1) (if b (echo 2)))") == (
        "if a; then echo 1;else\nif b; then echo 2;fi\nfi"
    )


def test_if_not_logical_test(script):
    assert script("(if-not (directory? d) (mkdir d))") == (
        "if [ ! -d d ]; then mkdir d;fi"
    )


def test_if_not_command_test(script):
    assert script("(if-not (grep x f) (echo missing))") == (
        "if ! grep x f; then echo missing;fi"
    )


def test_if_not_operator(script):
    assert script("(if (not (file-exists? f)) (touch f))") == (
        "if [ ! -e f ]; then touch f;fi"
    )


def test_when(script):
    assert script("(when (== a b) (echo 1) (echo 2))") == (
        'if [ \\( "a" == "b" \\) ]; then\necho 1\necho 2\nfi'
    )


# === Loops ====================================================================


def test_while(script):
    assert script("(while (!= x 0) (echo x))") == (
        'while [ \\( "x" != "0" \\) ]; do\necho x\ndone\n'
    )


def test_doseq(script):
    assert script("(doseq [x [1 2 3]] (echo (deref x)))") == (
        "for x in 1 2 3; do\necho ${x}\ndone"
    )


def test_doseq_single_value(script):
    assert script('(doseq [f "*.txt"] (rm f))') == (
        "for f in *.txt; do\nrm f\ndone"
    )


def test_doseq_requires_binding_vector(script):
    with pytest.raises(StructuralError):
        script("(doseq x (echo x))")


def test_case(script):
    assert script('(case (deref x) "a" (echo a) "b" (echo b))') == (
        "case ${x} in\na)\necho a;;\nb)\necho b;;\nesac"
    )


# === Variables ================================================================


def test_local(script):
    assert script("(local x 1)") == "local x=1"


def test_var(script):
    assert script("(var x 1)") == "x=1"


def test_set(script):
    assert script("(set! x (deref y))") == "x=${y}"


@pytest.mark.parametrize("form", ["local", "var", "set!"])
def test_hyphenated_variables_are_rejected(script, form):
    with pytest.raises(InvalidIdentifier) as exc_info:
        script(f"({form} my-x 1)")
    assert "Invalid bash symbol my-x" in str(exc_info.value)


def test_defvar(script):
    assert script("(defvar x 1)") == "x=1"
    assert script("(defvar my-x 1)") == "my-x=1"


def test_let(script):
    assert script("(let x (+ 1 2))") == "let x=(1 + 2)"


def test_alias(script):
    assert script('(alias ll "ls -l")') == "alias ll='ls -l'"


# === Strings and Output =======================================================


def test_str(script):
    assert script('(str "a" b 1)') == "ab1"


def test_quoted(script):
    assert script("(quoted (deref x))") == '"${x}"'


def test_println(script):
    assert script('(println "hello world")') == "echo hello world"
    assert script('(println (quoted "hi"))') == 'echo "hi"'
    assert script("(println foo bar)") == "echo foo bar"


def test_print(script):
    assert script('(print "x")') == "echo -n x"


def test_deref(script):
    assert script("(deref (ls))") == "$(ls)"
    assert script("(deref x)") == "${x}"


# === Arrays and Objects =======================================================


def test_return(script):
    assert script("(return 1)") == "return 1"


def test_new(script):
    assert script("(new Foo 1 2)") == "new Foo(1, 2)"


def test_aget(script):
    assert script("(aget arr 0)") == "${arr[0]}"


def test_aset(script):
    assert script("(aset arr 0 1)") == "arr[0]=1"


def test_method_call(script):
    assert script("(.method obj 1 2)") == "obj.method(1, 2)"
    assert script("(.m x)") == "x.m()"


# === Predicates ===============================================================


@pytest.mark.parametrize(
    "predicate, flag",
    [
        ("file-exists?", "-e"),
        ("directory?", "-d"),
        ("symlink?", "-h"),
        ("readable?", "-r"),
        ("writeable?", "-w"),
        ("empty?", "-z"),
    ],
)
def test_predicates(script, predicate, flag):
    assert script(f"({predicate} path)") == f"{flag} path"


def test_not(script):
    assert script("(not (file-exists? f))") == "! -e f"


# === Composition ==============================================================


def test_group(script):
    assert script("(group (ls) (pwd))") == "{ ls; pwd; }"


def test_pipe(script):
    assert script("(pipe (ls) (grep x))") == "ls | grep x"


def test_chain_or(script):
    assert script("(chain-or (test -f x) (touch x))") == (
        "test -f x || touch x"
    )


def test_chain_and(script):
    assert script("(chain-and (cd /tmp) (ls))") == "cd /tmp && ls"


def test_apply(script):
    assert script("(apply ls [-l -a])") == "ls -l -a"
    assert script("(apply + [1 2])") == "(1 + 2)"


def test_apply_requires_sequence(script):
    with pytest.raises(StructuralError):
        script("(apply ls x)")


# === Functions ================================================================


def test_defn(script):
    assert script("(defn foo [a b] (echo (deref a)))") == (
        "function foo() {\na=$1\nb=$2\necho ${a}\n }\n"
    )


def test_defn_anonymous(script):
    assert script("(defn [] (ls))") == "function () {\nls\n }\n"


def test_defn_requires_signature(script):
    with pytest.raises(StructuralError):
        script("(defn foo bar)")


# === Invocation ===============================================================


def test_invocation(script):
    assert script("(ls -l)") == "ls -l"
    assert script("(ls)") == "ls"


def test_blank_arguments_are_dropped(script):
    assert script('(echo "" x)') == "echo x"


def test_non_symbol_head(script):
    assert script('("ls" -l)') == "ls -l"
    assert script("((deref x) a)") == "${x} a"


def test_empty_splice_is_dropped():
    form = n.form(n.symbol("ls"), n.EMPTY_SPLICE, n.symbol("-l"))
    assert render(form) == "ls -l"


def test_source_command(script):
    assert script("(. /etc/profile)") == ". /etc/profile"


def test_special_forms_are_recognised():
    assert is_special_form("if")
    assert is_special_form("defn")
    assert not is_special_form("ls")


# === Statements ===============================================================


def test_do(script):
    assert script("(do (ls) (pwd))") == "ls\npwd\n"


def test_do_does_not_double_newlines(script):
    assert script("(do (do (ls)) (pwd))") == "ls\npwd\n"


def test_do_single_character_statements(script):
    assert script("(do a b)") == "a\nb\n"


def test_do_skips_empty_statements():
    form = n.form(n.symbol("do"), n.EMPTY_SPLICE, n.form(), n.symbol("ls"))
    assert render(form) == "ls\n"


def test_multiple_forms_are_statements(script):
    assert script("(ls) (pwd)") == "ls\npwd\n"
    assert script("(ls)") == "ls"


def test_nested_function_in_do(script):
    assert script("(do (defn f [] (ls)) (f))") == (
        "function f() {\nls\n }\nf\n"
    )
