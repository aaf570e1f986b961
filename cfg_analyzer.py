"""
CFG Analyzer - Core Data Structures and LR(0) Grammar Analysis

This module implements the grammar analysis engine behind the automaton
visualizer: rule parsing, symbol classification, FIRST/FOLLOW computation,
construction of the canonical LR(0) item sets and SLR(1)-style conflict
detection. It has no dependencies outside the standard library and performs
no I/O.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Set, Dict, Tuple, Optional, Iterable, Mapping, FrozenSet, Any
import re


ACCEPT_SYMBOL = "$accept"
END_MARKER = "$"
EPSILON = "ε"
ARROW = "->"
DOT_MARKER = "↑"


class GrammarError(ValueError):
    """Base class for errors raised while building a grammar."""


class MalformedRuleError(GrammarError):
    """A rule line that does not read as ``LHS -> SYM1 SYM2 ...``."""

    def __init__(self, line: str, reason: str = "expected format \"A -> B C\""):
        self.line = line
        self.reason = reason
        super().__init__(f'Invalid rule format: "{line}". {reason[:1].upper()}{reason[1:]}.')


class EmptyGrammarError(GrammarError):
    """Raised when no rules are supplied."""

    def __init__(self, message: str = "At least one rule must be provided."):
        super().__init__(message)


class TransitionKind(Enum):
    """Kind of an automaton edge."""
    SHIFT = "shift"
    GOTO = "goto"


class ConflictType(Enum):
    """Kind of a reported ambiguity."""
    SHIFT_REDUCE = "shift/reduce"
    REDUCE_REDUCE = "reduce/reduce"


@dataclass(frozen=True)
class Rule:
    """Represents a single production rule, addressed by its index."""
    index: int
    lhs: str
    rhs: Tuple[str, ...]
    epsilon: str = field(default=EPSILON, compare=False, repr=False)

    def __str__(self) -> str:
        if not self.rhs:
            return f"{self.lhs} -> {self.epsilon}"
        return f"{self.lhs} -> {' '.join(self.rhs)}"


@dataclass(frozen=True)
class Item:
    """
    An LR(0) item: a rule with a dot position.

    ``is_closure`` records whether the item was added by closure rather than
    by advancing the dot. It is display metadata only and takes no part in
    equality or hashing, so two items are the same iff they share rule and dot.
    """
    rule: Rule
    dot: int
    is_closure: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        symbols = list(self.rule.rhs)
        symbols.insert(self.dot, DOT_MARKER)
        return f"{self.rule.lhs} → {' '.join(symbols)}"

    @property
    def key(self) -> Tuple[int, int]:
        return (self.rule.index, self.dot)

    def is_complete(self) -> bool:
        """Check if the dot is at the end of the rule."""
        return self.dot >= len(self.rule.rhs)

    def next_symbol(self) -> Optional[str]:
        """Get the symbol after the dot, or None if at end."""
        if self.is_complete():
            return None
        return self.rule.rhs[self.dot]

    def advance(self) -> "Item":
        return Item(self.rule, self.dot + 1, is_closure=False)


@dataclass(frozen=True)
class State:
    """
    A state of the LR(0) automaton.

    Items are kept in the order they were added (kernel first, then closure
    items) for display; identity is the canonical sorted tuple of item keys.
    """
    items: Tuple[Item, ...] = field(compare=False)
    key: Tuple[Tuple[int, int], ...] = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "key", tuple(sorted({item.key for item in self.items})))

    def __str__(self) -> str:
        return "\n".join(str(item) for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def completed_items(self) -> List[Item]:
        return [item for item in self.items if item.is_complete()]

    def symbols_after_dot(self) -> List[str]:
        """Distinct symbols immediately after a dot, in item order."""
        return list(dict.fromkeys(
            item.next_symbol() for item in self.items if not item.is_complete()
        ))


@dataclass(frozen=True)
class Transition:
    """An edge of the automaton between two state indices."""
    source: int
    target: int
    symbol: str
    kind: TransitionKind

    def __str__(self) -> str:
        return f"{self.kind.value.upper()}({self.source}, {self.symbol}) = {self.target}"


@dataclass(frozen=True)
class Conflict:
    """Represents a shift/reduce or reduce/reduce conflict in one state."""
    state: int
    type: ConflictType
    symbol: str
    rules: Tuple[int, ...]
    intersection: Tuple[str, ...]

    def __str__(self) -> str:
        rules = ", ".join(str(r) for r in self.rules)
        return (f"{self.type.value} conflict in state {self.state} on symbol "
                f"'{self.symbol}' (rules {rules})")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "type": self.type.value,
            "symbol": self.symbol,
            "rules": list(self.rules),
            "intersection": list(self.intersection),
        }


@dataclass(frozen=True)
class LR0Automaton:
    """The canonical collection of LR(0) item sets with its transitions."""
    states: Tuple[State, ...]
    transitions: Tuple[Transition, ...]
    accept_state: Optional[int] = None
    start_state: int = 0

    def __str__(self) -> str:
        lines = [f"LR(0) Automaton with {len(self.states)} states"]
        lines.append(f"Accept state: {self.accept_state}")
        lines.append("\nStates:")
        for index, state in enumerate(self.states):
            lines.append(f"State {index}:")
            lines.extend(f"  {item}" for item in state.items)
        lines.append("\nTransitions:")
        lines.extend(f"  {transition}" for transition in self.transitions)
        return "\n".join(lines)

    def transitions_from(self, state_index: int) -> List[Transition]:
        return [t for t in self.transitions if t.source == state_index]


# --- Grammar text handling ---

def split_grammar_text(cfg_text: str) -> List[str]:
    """
    Turn raw grammar text into rule lines.

    Newlines are normalised, ``//`` line comments and ``/* */`` block comments
    are removed, every line is trimmed and empty lines are dropped.
    """
    cfg_text = cfg_text.replace("\r\n", "\n").replace("\r", "\n")
    cfg_text = re.sub(r'/\*.*?\*/', '', cfg_text, flags=re.DOTALL)
    cfg_text = re.sub(r'//.*$', '', cfg_text, flags=re.MULTILINE)

    lines = []
    for line in cfg_text.split('\n'):
        line = line.strip()
        if line:
            lines.append(line)
    return lines


def augment_rules(lines: Iterable[str], start_symbol: Optional[str] = None,
                  end_marker: str = END_MARKER) -> List[str]:
    """
    Prepend the augmented accept rule ``$accept -> <start> <end_marker>``.

    Args:
        lines: Rule lines of the user grammar
        start_symbol: Start symbol to wrap; defaults to the left side of the
            first line
        end_marker: End-of-input terminal

    Returns:
        New list of lines, accept rule first
    """
    lines = list(lines)
    if not lines:
        raise EmptyGrammarError()

    if start_symbol is None:
        start_symbol = lines[0].split(ARROW, 1)[0].strip()
        if not start_symbol or ARROW not in lines[0]:
            raise MalformedRuleError(lines[0])

    return [f"{ACCEPT_SYMBOL} {ARROW} {start_symbol} {end_marker}"] + lines


def parse_rule(line: str, index: int, epsilon: str = EPSILON) -> Rule:
    """Parse one ``LHS -> SYM1 SYM2 ...`` line into a Rule."""
    parts = line.split(ARROW)
    if len(parts) != 2:
        if len(parts) < 2:
            raise MalformedRuleError(line, f"missing '{ARROW}' separator")
        raise MalformedRuleError(line, f"expected a single '{ARROW}' separator")

    lhs, rhs_text = parts[0].strip(), parts[1].strip()
    if not lhs or not rhs_text:
        raise MalformedRuleError(line, "both sides of the rule must be non-empty")
    if len(lhs.split()) != 1:
        raise MalformedRuleError(line, "left-hand side must be a single symbol")

    # Epsilon is never a grammar symbol; "A -> ε" is the empty production
    rhs = tuple(symbol for symbol in rhs_text.split() if symbol != epsilon)
    return Rule(index=index, lhs=lhs, rhs=rhs, epsilon=epsilon)


def parse_rules(lines: Iterable[str], epsilon: str = EPSILON) -> Tuple[Rule, ...]:
    """
    Parse rule lines into an ordered, index-addressable tuple of rules.

    Raises:
        EmptyGrammarError: if no lines are supplied
        MalformedRuleError: on the first line that is not a valid rule
    """
    rules = tuple(parse_rule(line.strip(), index, epsilon)
                  for index, line in enumerate(lines))
    if not rules:
        raise EmptyGrammarError()
    return rules


def classify_symbols(rules: Iterable[Rule]) -> Tuple[FrozenSet[str], FrozenSet[str]]:
    """
    Split grammar symbols into terminals and non-terminals.

    Strategy:
    1. All LHS symbols are non-terminals
    2. Symbols that appear in a RHS but never as LHS are terminals
    """
    rules = list(rules)
    non_terminals = {rule.lhs for rule in rules}
    terminals = {symbol for rule in rules for symbol in rule.rhs
                 if symbol not in non_terminals}
    return frozenset(terminals), frozenset(non_terminals)


class FirstFollowComputer:
    """Computes FIRST and FOLLOW sets as least fixpoints over the rule list."""

    def __init__(self, rules: Tuple[Rule, ...], terminals: FrozenSet[str],
                 non_terminals: FrozenSet[str], epsilon: str = EPSILON):
        self.rules = rules
        self.terminals = terminals
        self.non_terminals = non_terminals
        self.epsilon = epsilon

    def compute_first_sets(self) -> Dict[str, FrozenSet[str]]:
        """
        Compute FIRST sets for all grammar symbols.

        FIRST(a) = {a} for a terminal. For ``A -> Y1 ... Yk`` add
        FIRST(Y1) - {ε}, continue with Y2 while the previous symbol is
        nullable, and add ε to FIRST(A) when every Yi is nullable.
        Passes repeat until no set grows.
        """
        first: Dict[str, Set[str]] = {nt: set() for nt in self.non_terminals}
        for terminal in self.terminals:
            first[terminal] = {terminal}

        changed = True
        while changed:
            changed = False
            for rule in self.rules:
                first_lhs = first[rule.lhs]
                before_size = len(first_lhs)

                nullable = True
                for symbol in rule.rhs:
                    symbol_first = first[symbol]
                    first_lhs.update(symbol_first - {self.epsilon})
                    if self.epsilon not in symbol_first:
                        nullable = False
                        break
                if nullable:
                    first_lhs.add(self.epsilon)

                if len(first_lhs) > before_size:
                    changed = True

        return {symbol: frozenset(values) for symbol, values in first.items()}

    def compute_follow_sets(self, first_sets: Mapping[str, FrozenSet[str]],
                            start_symbol: str,
                            end_marker: str = END_MARKER) -> Dict[str, FrozenSet[str]]:
        """
        Compute FOLLOW sets for all non-terminals.

        FOLLOW(start) contains the end marker. For every occurrence of a
        non-terminal B in ``A -> α B β`` add FIRST(β) - {ε} to FOLLOW(B), and
        FOLLOW(A) as well when β is nullable or empty.
        """
        follow: Dict[str, Set[str]] = {nt: set() for nt in self.non_terminals}
        follow[start_symbol].add(end_marker)

        changed = True
        while changed:
            changed = False
            for rule in self.rules:
                rhs = rule.rhs
                for i, symbol in enumerate(rhs):
                    if symbol not in self.non_terminals:
                        continue

                    follow_b = follow[symbol]
                    before_size = len(follow_b)

                    nullable = True
                    for following in rhs[i + 1:]:
                        following_first = first_sets[following]
                        follow_b.update(following_first - {self.epsilon})
                        if self.epsilon not in following_first:
                            nullable = False
                            break

                    if nullable:
                        follow_b.update(follow[rule.lhs])

                    if len(follow_b) > before_size:
                        changed = True

        return {symbol: frozenset(values) for symbol, values in follow.items()}


class LR0ItemSetBuilder:
    """Builds the canonical collection of LR(0) item sets."""

    def __init__(self, rules: Tuple[Rule, ...], terminals: FrozenSet[str],
                 non_terminals: FrozenSet[str]):
        self.rules = rules
        self.terminals = terminals
        self.non_terminals = non_terminals

        # Pre-compute rules by LHS for closure lookups
        self._rules_by_lhs: Dict[str, List[Rule]] = {}
        for rule in rules:
            self._rules_by_lhs.setdefault(rule.lhs, []).append(rule)

    def closure(self, items: Iterable[Item]) -> State:
        """
        Compute the closure of a set of LR(0) items.

        Algorithm:
        1. Start with the given items
        2. For each item [A -> α•Bβ] where B is a non-terminal
        3. Add [B -> •γ] for every rule B -> γ not already present
        4. Continue until the worklist is exhausted
        """
        closure_items: List[Item] = []
        seen: Set[Tuple[int, int]] = set()
        for item in items:
            if item.key not in seen:
                seen.add(item.key)
                closure_items.append(item)

        i = 0
        while i < len(closure_items):
            next_symbol = closure_items[i].next_symbol()
            i += 1
            if next_symbol is None or next_symbol not in self.non_terminals:
                continue
            for rule in self._rules_by_lhs.get(next_symbol, []):
                new_item = Item(rule, 0, is_closure=True)
                if new_item.key not in seen:
                    seen.add(new_item.key)
                    closure_items.append(new_item)

        return State(tuple(closure_items))

    def goto(self, state: State, symbol: str) -> State:
        """
        Compute GOTO(I, X): advance the dot past X in every item of I whose
        next symbol is X and return the closure of the result.
        """
        moved = [item.advance() for item in state.items if item.next_symbol() == symbol]
        return self.closure(moved)

    def build(self) -> LR0Automaton:
        """
        Build the LR(0) automaton with a FIFO worklist.

        State indices follow discovery order; a computed state equal to an
        already discovered one reuses that index.
        """
        initial_state = self.closure([Item(self.rules[0], 0)])

        states: List[State] = [initial_state]
        state_map: Dict[Tuple[Tuple[int, int], ...], int] = {initial_state.key: 0}
        transitions: List[Transition] = []

        worklist = [0]
        position = 0
        while position < len(worklist):
            current_index = worklist[position]
            position += 1
            current_state = states[current_index]

            for symbol in current_state.symbols_after_dot():
                next_state = self.goto(current_state, symbol)

                target_index = state_map.get(next_state.key)
                if target_index is None:
                    target_index = len(states)
                    states.append(next_state)
                    state_map[next_state.key] = target_index
                    worklist.append(target_index)

                kind = TransitionKind.SHIFT if symbol in self.terminals else TransitionKind.GOTO
                transitions.append(Transition(current_index, target_index, symbol, kind))

        return LR0Automaton(
            states=tuple(states),
            transitions=tuple(transitions),
            accept_state=self._find_accept_state(states),
        )

    def _find_accept_state(self, states: List[State]) -> Optional[int]:
        accept_rule = self.rules[0]
        for index, state in enumerate(states):
            for item in state.items:
                if item.rule == accept_rule and item.is_complete():
                    return index
        return None


class ConflictDetector:
    """
    Detects shift/reduce and reduce/reduce conflicts in an LR(0) automaton.

    Lookaheads for reductions come from FOLLOW(lhs), so this is an SLR(1)
    approximation: it can report conflicts an LR(1) parser would not have.
    Conflicts are recomputed on every call and never deduplicated.
    """

    def __init__(self, rules: Tuple[Rule, ...], automaton: LR0Automaton,
                 follow_sets: Mapping[str, FrozenSet[str]]):
        self.rules = rules
        self.automaton = automaton
        self.follow_sets = follow_sets

    def detect(self) -> List[Conflict]:
        conflicts: List[Conflict] = []
        for state_index in range(len(self.automaton.states)):
            conflicts.extend(self.detect_in_state(state_index))
        return conflicts

    def shift_actions(self, state_index: int) -> Dict[str, int]:
        """Map terminal -> target state from the state's shift transitions."""
        return {
            t.symbol: t.target
            for t in self.automaton.transitions_from(state_index)
            if t.kind is TransitionKind.SHIFT
        }

    def reduce_actions(self, state_index: int) -> Dict[str, List[int]]:
        """Map terminal -> rule indices reducible on it in the given state."""
        accept_rule = self.rules[0]
        actions: Dict[str, List[int]] = {}
        for item in self.automaton.states[state_index].completed_items():
            if item.rule == accept_rule:
                continue
            for terminal in sorted(self.follow_sets[item.rule.lhs]):
                actions.setdefault(terminal, []).append(item.rule.index)
        return actions

    def detect_in_state(self, state_index: int) -> List[Conflict]:
        conflicts: List[Conflict] = []
        shifts = self.shift_actions(state_index)
        reductions = self.reduce_actions(state_index)

        for symbol in shifts:
            if symbol not in reductions:
                continue
            competing = [
                rule_index for rule_index in reductions[symbol]
                if symbol in self.follow_sets[self.rules[rule_index].lhs]
            ]
            if competing:
                conflicts.append(Conflict(
                    state=state_index,
                    type=ConflictType.SHIFT_REDUCE,
                    symbol=symbol,
                    rules=tuple(competing),
                    intersection=(symbol,),
                ))

        for symbol, rule_indices in reductions.items():
            if len(rule_indices) < 2:
                continue
            follow_sets = [self.follow_sets[self.rules[r].lhs] for r in rule_indices]
            intersection = frozenset.intersection(*follow_sets)
            if intersection:
                conflicts.append(Conflict(
                    state=state_index,
                    type=ConflictType.REDUCE_REDUCE,
                    symbol=symbol,
                    rules=tuple(rule_indices),
                    intersection=tuple(sorted(intersection)),
                ))

        return conflicts


class Grammar:
    """
    An augmented context-free grammar with its analysis results.

    Construction parses the rule lines, classifies symbols, solves FIRST and
    FOLLOW and builds the LR(0) automaton. ``lines[0]`` must be the augmented
    accept rule (see ``augment_rules``); its LHS is the start symbol. Every
    result is immutable once the constructor returns.
    """

    def __init__(self, lines: Iterable[str], end_marker: str = END_MARKER,
                 epsilon: str = EPSILON):
        self.end_marker = end_marker
        self.epsilon = epsilon

        self.rules = parse_rules(lines, epsilon)
        self.start_symbol = self.rules[0].lhs
        self.terminals, self.non_terminals = classify_symbols(self.rules)

        ff_computer = FirstFollowComputer(self.rules, self.terminals,
                                          self.non_terminals, epsilon)
        self.first_sets = MappingProxyType(ff_computer.compute_first_sets())
        self.follow_sets = MappingProxyType(ff_computer.compute_follow_sets(
            self.first_sets, self.start_symbol, end_marker))

        self.automaton = LR0ItemSetBuilder(self.rules, self.terminals,
                                           self.non_terminals).build()

    @classmethod
    def from_text(cls, cfg_text: str, start_symbol: Optional[str] = None,
                  **kwargs) -> "Grammar":
        """Build from raw grammar text, adding the accept rule."""
        end_marker = kwargs.get("end_marker", END_MARKER)
        lines = augment_rules(split_grammar_text(cfg_text), start_symbol, end_marker)
        return cls(lines, **kwargs)

    def __str__(self) -> str:
        lines = [f"Start Symbol: {self.start_symbol}"]
        lines.append(f"Terminals: {sorted(self.terminals)}")
        lines.append(f"Non-terminals: {sorted(self.non_terminals)}")
        lines.append("Rules:")
        for rule in self.rules:
            lines.append(f"  {rule.index}: {rule}")
        return "\n".join(lines)

    @property
    def states(self) -> Tuple[State, ...]:
        return self.automaton.states

    @property
    def transitions(self) -> Tuple[Transition, ...]:
        return self.automaton.transitions

    @property
    def accept_state(self) -> Optional[int]:
        return self.automaton.accept_state

    def first(self, symbol: str) -> FrozenSet[str]:
        return self.first_sets[symbol]

    def follow(self, symbol: str) -> FrozenSet[str]:
        return self.follow_sets[symbol]

    def rule_to_string(self, index: int) -> str:
        return str(self.rules[index])

    def detect_conflicts(self) -> List[Conflict]:
        """Detect conflicts; recomputed from the finished automaton on every call."""
        return ConflictDetector(self.rules, self.automaton, self.follow_sets).detect()


class GrammarWorkflowManager:
    """
    Manages the step-by-step grammar analysis workflow.

    This class orchestrates the interactive process by:
    - Parsing grammar rules and extracting potential start symbols
    - Managing start symbol selection
    - Building the LR(0) automaton and conflict report for that symbol
    - Tracking workflow state throughout the process
    """

    def __init__(self, cfg_text: str, end_marker: str = END_MARKER):
        """
        Initialize the workflow manager with grammar text.

        Args:
            cfg_text: Grammar rules, one ``LHS -> SYM ...`` per line
            end_marker: End-of-input terminal used by the accept rule
        """
        self.cfg_text = cfg_text
        self.end_marker = end_marker
        self.lines: List[str] = []
        self.rules: Tuple[Rule, ...] = ()
        self.grammar: Optional[Grammar] = None
        self.start_symbol: Optional[str] = None
        self.conflicts: List[Conflict] = []
        self.workflow_state = "initial"
        self.potential_start_symbols: List[str] = []

    def parse_productions(self) -> Dict[str, Any]:
        """
        Parse grammar rules and extract potential start symbols.

        Returns:
            Dictionary containing success status, productions list and
            potential start symbols, or an error description
        """
        try:
            self.lines = split_grammar_text(self.cfg_text)
            self.rules = parse_rules(self.lines)
        except GrammarError as e:
            return self._error_result(e, productions=[], start_symbols=[])

        terminals, non_terminals = classify_symbols(self.rules)

        # Keep first-appearance order so the grammar's own start comes first
        self.potential_start_symbols = list(dict.fromkeys(rule.lhs for rule in self.rules))
        self.workflow_state = "productions_parsed"

        return {
            'success': True,
            'productions': [str(rule) for rule in self.rules],
            'start_symbols': self.potential_start_symbols,
            'grammar_info': {
                'terminals': sorted(terminals),
                'non_terminals': sorted(non_terminals),
                'production_count': len(self.rules),
            },
        }

    def set_start_symbol(self, start_symbol: Optional[str] = None) -> Dict[str, Any]:
        """
        Set the start symbol, build the augmented grammar and its automaton.

        Args:
            start_symbol: One of the potential start symbols; defaults to the
                left side of the first rule

        Returns:
            Dictionary with the automaton export, conflicts and FIRST/FOLLOW sets
        """
        if self.workflow_state == "initial":
            return {
                'success': False,
                'error': "Must parse productions first before setting start symbol",
                'error_type': 'workflow_error',
            }

        if start_symbol is None:
            start_symbol = self.potential_start_symbols[0]
        if start_symbol not in self.potential_start_symbols:
            return {
                'success': False,
                'error': (f"Invalid start symbol '{start_symbol}'. "
                          f"Must be one of: {self.potential_start_symbols}"),
                'error_type': 'workflow_error',
            }

        try:
            self.grammar = Grammar(augment_rules(self.lines, start_symbol, self.end_marker),
                                   end_marker=self.end_marker)
        except GrammarError as e:
            return self._error_result(e)

        self.start_symbol = start_symbol
        self.conflicts = self.grammar.detect_conflicts()
        self.workflow_state = "automaton_built"

        from visualization import VisualizationGenerator
        visualization = VisualizationGenerator().generate_complete_visualization(
            self.grammar, self.conflicts)

        return {
            'success': True,
            'start_symbol': start_symbol,
            'productions': [str(rule) for rule in self.grammar.rules],
            'automaton': visualization['automaton'],
            'dot': visualization['dot'],
            'conflicts': [conflict.to_dict() for conflict in self.conflicts],
            'conflict_states': visualization['conflict_states'],
            'conflicts_text': visualization['conflicts_text'],
            'conflicts_html': visualization['conflicts_html'],
            'first_sets': _sorted_sets(self.grammar.first_sets),
            'follow_sets': _sorted_sets(self.grammar.follow_sets),
            'automaton_info': {
                'states_count': len(self.grammar.states),
                'transitions_count': len(self.grammar.transitions),
                'accept_state': self.grammar.accept_state,
                'conflicts_count': len(self.conflicts),
            },
        }

    def get_workflow_state(self) -> Dict[str, Any]:
        """
        Get current workflow state and available actions.

        Returns:
            Dictionary containing current state and available next actions
        """
        state_info: Dict[str, Any] = {
            'current_state': self.workflow_state,
            'available_actions': [],
        }

        if self.workflow_state == "initial":
            state_info['available_actions'] = ['parse_productions']
            state_info['description'] = "Ready to parse grammar rules"

        elif self.workflow_state == "productions_parsed":
            state_info['available_actions'] = ['set_start_symbol']
            state_info['description'] = "Rules parsed, ready to select start symbol"
            state_info['productions_count'] = len(self.rules)
            state_info['potential_start_symbols'] = self.potential_start_symbols

        elif self.workflow_state == "automaton_built":
            state_info['available_actions'] = ['set_start_symbol']
            state_info['description'] = "Automaton built"
            state_info['start_symbol'] = self.start_symbol
            state_info['conflicts_count'] = len(self.conflicts)

        return state_info

    def _error_result(self, error: GrammarError, **extra) -> Dict[str, Any]:
        result = {
            'success': False,
            'error': str(error),
            'error_type': ('malformed_rule' if isinstance(error, MalformedRuleError)
                           else 'empty_grammar'),
        }
        if isinstance(error, MalformedRuleError):
            result['line'] = error.line
        result.update(extra)
        return result


def _sorted_sets(sets: Mapping[str, FrozenSet[str]]) -> Dict[str, List[str]]:
    return {symbol: sorted(values) for symbol, values in sorted(sets.items())}
