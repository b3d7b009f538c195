import pytest

from kategg import Language, LanguageError, ParseError, parse_equations, parse_pattern, parse_term, to_sexp
from kategg.kat import KAT


class TestParse:
    def test_nested_term(self):
        t = parse_term("(seq (test a) (star p))", KAT)
        assert t == ("seq", ("test", ("a",)), ("star", ("p",)))
        assert to_sexp(t) == "(seq (test a) (star p))"

    def test_leaves(self):
        assert parse_term("0", KAT) == ("0",)
        assert parse_term("  alpha  ") == ("alpha",)

    def test_pattern_variables(self):
        p = parse_pattern("(par ?p (seq ?q ?p))", KAT)
        assert p == ("par", "?p", ("seq", "?q", "?p"))
        assert parse_pattern("?x") == "?x"
        assert to_sexp(p) == "(par ?p (seq ?q ?p))"

    def test_equations(self):
        eqs = parse_equations("?r = (par ?q ?r), ?p = ?q", KAT)
        assert eqs == [("?r", ("par", "?q", "?r")), ("?p", "?q")]

    @pytest.mark.parametrize(
        "text, token, position",
        [
            ("(seq a b", "(", 0),
            ("(seq a b))", ")", 9),
            ("a b", "b", 2),
            ("()", ")", 1),
            ("(seq a)", "seq", 1),
            ("(frob a)", "frob", 1),
            ("(star ?p)", "?p", 6),
        ],
    )
    def test_malformed_terms(self, text, token, position):
        with pytest.raises(ParseError) as info:
            parse_term(text, KAT)
        assert info.value.token == token
        assert info.value.position == position

    def test_empty_input(self):
        with pytest.raises(ParseError):
            parse_term("   ")

    def test_variable_in_operator_position(self):
        with pytest.raises(ParseError):
            parse_pattern("(?f a)")

    def test_missing_equals(self):
        with pytest.raises(ParseError):
            parse_equations("?a (par ?a ?b)")


class TestLanguage:
    def test_arity(self):
        assert KAT.arity("seq") == 2
        assert KAT.arity("0") == 0
        assert KAT.arity("alpha") == 0
        assert KAT.is_variable("alpha")
        assert not KAT.is_variable("star")

    @pytest.mark.parametrize(
        "operators",
        [{"f": -1}, {"f": 1.5}, {"": 1}, {"?f": 1}, {"a b": 0}, {"(": 0}, {"f": True}],
    )
    def test_invalid_definitions(self, operators):
        with pytest.raises(LanguageError):
            Language("bad", operators)

    def test_closed_language_rejects_variables(self):
        closed = Language("closed", {"zero": 0, "succ": 1}, allow_variables=False)
        assert parse_term("(succ zero)", closed) == ("succ", ("zero",))
        with pytest.raises(ParseError):
            parse_term("(succ x)", closed)
        with pytest.raises(LanguageError):
            closed.check("x", 0)
