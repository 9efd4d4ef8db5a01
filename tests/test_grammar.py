# tests/test_grammar.py
"""
Tests for the script line grammar: whole-line shapes, in-line shapes and
trigger condition parsing.
"""

import pytest

from mmscript.grammar import (
    SCRIPT_GRAMMAR,
    find_assignments,
    find_call_commands,
    find_invocations,
    find_oxygen,
    find_triggers,
    find_when_conditions,
    has_spawner,
    is_identifier,
    parse_condition,
    parse_declaration,
    parse_event_open,
    parse_increment,
    parse_int,
    split_comment,
)


class TestGrammarWellFormed:

    def test_key_rules_exist(self):
        for rule in ("declaration", "event_open", "invocation", "trigger",
                     "assignment", "condition_expr", "oxygen", "spawner"):
            assert rule in SCRIPT_GRAMMAR, f"Rule {rule!r} missing"

    def test_identifier(self):
        assert is_identifier("Counter_2")
        assert not is_identifier("2Counter")
        assert not is_identifier("")


class TestComments:

    def test_no_comment(self):
        assert split_comment("msg:Hello;") == ("msg:Hello;", None)

    def test_trailing_comment(self):
        assert split_comment("State:1; # open the gate") == (
            "State:1; ", "open the gate")

    def test_hash_inside_string(self):
        code, comment = split_comment('msg:"Go #1"; # note')
        assert code == 'msg:"Go #1"; '
        assert comment == "note"


class TestWholeLineShapes:

    @pytest.mark.parametrize("line,expected", [
        ("int Counter=0", ("int", "Counter", "0")),
        ("int Counter = 0;", ("int", "Counter", "0")),
        ("  bool Done=false", ("bool", "Done", "false")),
        ("timer Wave=30,5,10,SpawnWave", ("timer", "Wave", "30,5,10,SpawnWave")),
        ("Score=5", ("unknown", "Score", "5")),
    ])
    def test_declarations(self, line, expected):
        decl = parse_declaration(line)
        assert decl is not None
        assert (decl.var_type, decl.name, decl.value) == expected

    @pytest.mark.parametrize("line", [
        "when(a==1)[B]", "a==1", "msg:Hello;", "Start::", "",
    ])
    def test_not_declarations(self, line):
        assert parse_declaration(line) is None

    def test_event_open(self):
        assert parse_event_open("Start::") == "Start"
        assert parse_event_open("  Start:: ") == "Start"

    def test_invocation_is_not_an_opener(self):
        assert parse_event_open("Start::;") is None
        assert parse_event_open("Start::msg:Hi;") is None

    def test_increment(self):
        assert parse_increment("Cooldown+30") == ("Cooldown", 30.0)
        assert parse_increment(" Cooldown + 2.5 ") == ("Cooldown", 2.5)
        assert parse_increment("Cooldown-30") is None

    def test_int(self):
        assert parse_int("7") == 7
        assert parse_int(" -5 ") == -5
        assert parse_int("5x") is None
        assert parse_int("true") is None


class TestInLineShapes:

    def test_two_triggers_on_one_line(self):
        trigs = find_triggers("when(a==1 and b>2)[Go] if(c)[Stop]")
        assert [(t.keyword, t.condition, t.target) for t in trigs] == [
            ("when", "a==1 and b>2", "Go"),
            ("if", "c", "Stop"),
        ]
        assert trigs[0].column == 1

    def test_trigger_condition_with_parentheses(self):
        trig, = find_triggers("when((a==1) or (b==2))[Go]")
        assert trig.condition == "(a==1) or (b==2)"
        assert trig.target == "Go"

    def test_when_conditions_with_and_without_target(self):
        assert find_when_conditions("when(a==1)[Go] when(b or c)") == [
            "a==1", "b or c",
        ]
        assert find_when_conditions("if(c)[Stop] whenever(x)") == []

    def test_invocations(self):
        assert find_invocations("Next::;") == ["Next"]
        assert find_invocations("msg:Hi;") == []

    def test_call_command(self):
        assert find_call_commands("call:Finish;") == ["Finish"]

    def test_assignments(self):
        asgs = find_assignments("State:1;")
        assert [(a.name, a.value) for a in asgs] == [("State", "1")]

    def test_assignment_respects_word_boundary(self):
        asgs = find_assignments("xState:1;")
        assert [a.name for a in asgs] == ["xState"]

    def test_invocation_is_not_an_assignment(self):
        assert find_assignments("Next::;") == []

    def test_oxygen(self):
        assert find_oxygen("oxygen:100/200") == (100, 200)
        assert find_oxygen("msg:oxygen;") is None

    def test_spawner(self):
        assert has_spawner("spawncap:CreatureRockMonster_C,1,3;")
        assert has_spawner("addrandomspawn:CreatureSlug_C,10,20;")
        assert not has_spawner("msg:spawncap")


class TestConditions:

    def test_comparisons_and_operators(self):
        info = parse_condition("State==0 and ore>=5")
        assert [(c.lhs, c.op, c.rhs) for c in info.comparisons] == [
            ("State", "==", "0"), ("ore", ">=", "5"),
        ]
        assert info.logic_operators == 1
        assert info.names == ("State", "ore")

    def test_operator_words_inside_identifiers(self):
        info = parse_condition("ore>=5 or order==1")
        assert info.logic_operators == 1
        assert "ore" in info.names and "order" in info.names

    def test_bare_words(self):
        info = parse_condition("enter:1,1 and Done==false")
        assert "enter" in info.names
        assert "Done" in info.names
        assert info.comparisons[0].other_side("Done") == "false"

    def test_other_side(self):
        cmp = parse_condition("time>=Cooldown").comparisons[0]
        assert cmp.involves("Cooldown")
        assert cmp.other_side("Cooldown") == "time"
        assert cmp.other_side("nothing") is None

    def test_empty_condition(self):
        info = parse_condition("")
        assert info.comparisons == ()
        assert info.logic_operators == 0
