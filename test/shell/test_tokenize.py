from minish.shell.grammer import tokenizer
from minish.shell.grammer.tokenizer import token_list, tokenize


def types(text: str):
    return [token.type for token in tokenize(text)]


def values(text: str):
    return [token.value for token in tokenize(text)]


def test_lexer():
    lexer = tokenizer.main()
    assert lexer is not None

    result = list(tokenize('echo a'))
    assert result


def test_tokenize_assignment():
    tokens = token_list('a=10')
    assert len(tokens) == 1

    token = tokens[0]
    assert token.type == 'ASSIGNMENT'
    assert token.name == 'a'
    assert token.value == '10'
    assert token.raw == 'a=10'


def test_tokenize_quoted_assignment():
    token, = token_list('a="x y"')
    assert token.type == 'ASSIGNMENT'
    assert token.value == 'x y'

    token, = token_list("b='$x'")
    assert token.value == '$x'


def test_tokenize_arithmetic_assignment():
    token, = token_list('i=$((i + 1))')
    assert token.type == 'ASSIGNMENT'
    assert token.value == '$((i + 1))'


def test_tokenize_keywords():
    assert types('if then else fi') == ['KEYWORD'] * 4
    assert types('for in do done') == ['KEYWORD'] * 4

    # keywords must be separate words
    assert types('iffy done.txt') == ['IDENTIFIER', 'IDENTIFIER']
    assert types('done=1') == ['ASSIGNMENT']


def test_tokenize_strings():
    assert types('"a b" \'c d\'') == ['DOUBLE_QUOTED_STRING',
                                      'SINGLE_QUOTED_STRING']
    assert values('"a b" \'c d\'') == ['a b', 'c d']
    assert values(r'"say \"hi\""') == ['say "hi"']


def test_tokenize_variables():
    tokens = token_list('$a ${b} $1 $# $@')
    assert [t.type for t in tokens] == ['VARIABLE'] * 5
    assert [t.name for t in tokens] == ['a', 'b', '1', '#', '@']
    assert tokens[1].value == '$b'


def test_tokenize_operators():
    assert types('a == b') == ['IDENTIFIER', 'OPERATOR', 'IDENTIFIER']
    assert types('a != b') == ['IDENTIFIER', 'OPERATOR', 'IDENTIFIER']
    assert values('>> > < >= <=') == ['>>', '>', '<', '>=', '<=']
    assert types('>> > <') == ['REDIRECTION'] * 3


def test_tokenize_separators():
    assert types('a; b') == ['IDENTIFIER', 'SEMICOLON', 'IDENTIFIER']
    assert types('a ;; b') == ['IDENTIFIER', 'DOUBLE_SEMICOLON', 'IDENTIFIER']
    assert types('a | b') == ['IDENTIFIER', 'PIPE', 'IDENTIFIER']


def test_tokenize_newline():
    tokens = token_list('a\nb')
    assert [t.type for t in tokens] == ['IDENTIFIER', 'SEMICOLON', 'IDENTIFIER']
    assert tokens[1].value == ';'
    assert tokens[1].raw == '\n'


def test_tokenize_brackets():
    assert types('[ ] ( ) { }') == ['LBRACKET', 'RBRACKET', 'BRACKET',
                                    'BRACKET', 'FUNCTION_START', 'FUNCTION_END']


def test_tokenize_numbers():
    assert types('10 -1 3.14') == ['NUMBER'] * 3
    assert types('-eq 1.txt') == ['IDENTIFIER', 'IDENTIFIER']


def test_tokenize_comment():
    assert values('echo a # a comment') == ['echo', 'a']
    assert list(tokenize('# only a comment')) == []


def test_tokenize_unknown():
    # any input is accepted
    assert types('a = b') == ['IDENTIFIER', 'UNKNOWN', 'IDENTIFIER']
    assert types('&') == ['UNKNOWN']


def test_tokenize_is_deterministic():
    text = 'for i in 1 2; do echo "$i"; done | grep 1'
    assert token_list(text) == token_list(text)


def test_tokenize_embedded_variables():
    token, = token_list('$name.txt')
    assert token.type == 'IDENTIFIER'
    assert token.value == '$name.txt'

    token, = token_list('a${b}c')
    assert token.type == 'IDENTIFIER'

    assert types('$a $b') == ['VARIABLE', 'VARIABLE']
