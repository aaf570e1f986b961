import pytest

from cfg_analyzer import Grammar


EXPRESSION_RULES = ["$accept -> E $", "E -> E + T", "E -> T", "T -> id"]

DANGLING_ELSE_RULES = [
    "$accept -> S $",
    "S -> if c then S",
    "S -> if c then S else S",
    "S -> x",
]

REDUCE_REDUCE_RULES = [
    "$accept -> S $",
    "S -> A x",
    "S -> B x",
    "A -> a",
    "B -> a",
]


@pytest.fixture
def expression_grammar():
    return Grammar(EXPRESSION_RULES)


@pytest.fixture
def dangling_else_grammar():
    return Grammar(DANGLING_ELSE_RULES)


@pytest.fixture
def reduce_reduce_grammar():
    return Grammar(REDUCE_REDUCE_RULES)
