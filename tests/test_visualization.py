from cfg_analyzer import Grammar
from visualization import (
    ConflictReportFormatter,
    DOTGenerator,
    FlowLayoutGenerator,
    LayoutConfig,
    VisualizationConfig,
    VisualizationGenerator,
    summarize_conflicts,
)


def test_nodes_and_edges_follow_export_contract(expression_grammar):
    data = FlowLayoutGenerator().generate_automaton_data(expression_grammar.automaton)

    nodes = {node['id']: node for node in data['nodes']}
    assert [node['id'] for node in data['nodes']] == [f"state-{i}" for i in range(7)]
    assert nodes['state-0']['type'] == 'custom'
    assert nodes['state-0']['data'] == {
        'label': "$accept → ↑ E $\nE → ↑ E + T\nE → ↑ T\nT → ↑ id",
    }

    assert data['edges'][0] == {
        'id': 'edge-0',
        'source': 'state-0',
        'target': 'state-1',
        'type': 'custom',
        'data': {'label': 'E'},
    }
    assert len(data['edges']) == len(expression_grammar.transitions)


def test_layered_positions(expression_grammar):
    generator = FlowLayoutGenerator()
    assert generator.compute_layers(expression_grammar.automaton) == [[0], [1, 2, 3], [4, 5], [6]]

    positions = {
        node['id']: (node['position']['x'], node['position']['y'])
        for node in generator.generate_automaton_data(expression_grammar.automaton)['nodes']
    }
    assert positions['state-0'] == (5000, 4400)
    assert positions['state-1'] == (4600, 4800)
    assert positions['state-2'] == (5000, 4800)
    assert positions['state-3'] == (5400, 4800)
    assert positions['state-4'] == (4800, 5200)
    assert positions['state-5'] == (5200, 5200)
    assert positions['state-6'] == (5000, 5600)


def test_layout_config_spacing(expression_grammar):
    config = LayoutConfig(node_spacing_x=100, node_spacing_y=50, canvas_width=1000, canvas_height=1000)
    nodes = FlowLayoutGenerator(config).generate_automaton_data(expression_grammar.automaton)['nodes']
    root = nodes[0]
    assert root['position'] == {'x': 500, 'y': 500 - 75}


def test_conflict_annotations(dangling_else_grammar):
    conflicts = dangling_else_grammar.detect_conflicts()
    summary = summarize_conflicts(conflicts)
    assert summary == {7: {'conflictType': 'shift/reduce', 'conflictToken': 'else'}}

    nodes = FlowLayoutGenerator().generate_automaton_data(dangling_else_grammar.automaton, conflicts)['nodes']
    annotated = [node for node in nodes if 'conflictType' in node['data']]
    assert [node['id'] for node in annotated] == ['state-7']
    assert annotated[0]['data']['conflictToken'] == 'else'


def test_summary_keeps_first_conflict_per_state():
    grammar = Grammar(["$accept -> S $", "S -> A", "S -> B", "A -> a", "B -> a",
                       "S -> A d", "S -> B d"])
    summary = summarize_conflicts(grammar.detect_conflicts())
    assert list(summary.values()) == [{'conflictType': 'reduce/reduce', 'conflictToken': '$'}]


def test_automaton_dot(dangling_else_grammar):
    dot = DOTGenerator().generate_automaton_dot(
        dangling_else_grammar.automaton, conflicts=dangling_else_grammar.detect_conflicts())
    lines = dot.split('\n')
    assert lines[0] == 'digraph "LR(0) Automaton" {'
    assert lines[-1] == '}'
    assert any(line.startswith('  state0 [') and 'style=bold' in line for line in lines)
    assert any(line.startswith('  state4 [') and 'peripheries=2' in line for line in lines)
    assert any(line.startswith('  state7 [') and 'color=red' in line for line in lines)
    assert '  state7 -> state8 [label="else"];' in lines
    assert '  state0 -> state1 [label="S", style=dashed];' in lines


def test_compact_dot_labels(expression_grammar):
    dot = DOTGenerator(VisualizationConfig(compact_mode=True)).generate_automaton_dot(expression_grammar.automaton)
    assert '  state3 [label="3"];' in dot.split('\n')


def test_dot_escapes_quotes():
    grammar = Grammar(['$accept -> S $', 'S -> "a"'])
    dot = DOTGenerator().generate_automaton_dot(grammar.automaton)
    assert '[label="\\"a\\""];' in dot


def test_text_conflict_report(dangling_else_grammar):
    formatter = ConflictReportFormatter()
    report = formatter.format_conflict_report(dangling_else_grammar.detect_conflicts(), dangling_else_grammar)
    assert report.startswith("Found 1 conflict(s)")
    assert "shift/reduce conflict in state 7 on symbol 'else'" in report
    assert "    (1) S -> if c then S" in report
    assert "Lookahead intersection: {else}" in report

    assert formatter.format_conflict_report([], dangling_else_grammar) == "No conflicts detected in the grammar."


def test_html_conflict_report_is_escaped():
    grammar = Grammar(["$accept -> S $", "S -> S < S", "S -> n"])
    conflicts = grammar.detect_conflicts()
    assert [c.symbol for c in conflicts] == ["<"]

    report = ConflictReportFormatter(VisualizationConfig(include_inline_styles=False)) \
        .format_conflict_report_html(conflicts, grammar)
    assert report.startswith('<div class="conflict-report">')
    assert '<strong>Symbol:</strong> &lt;' in report
    assert 'S -&gt; S &lt; S' in report


def test_grammar_error_html():
    html_text = ConflictReportFormatter().format_grammar_error('Invalid rule', line='A <B> C')
    assert '<h4>Grammar Error</h4>' in html_text
    assert '<code>A &lt;B&gt; C</code>' in html_text


def test_complete_visualization(dangling_else_grammar):
    result = VisualizationGenerator().generate_complete_visualization(dangling_else_grammar)
    assert set(result) == {'automaton', 'conflict_states', 'dot', 'conflicts_text', 'conflicts_html'}
    assert result['conflict_states'] == {'7': {'conflictType': 'shift/reduce', 'conflictToken': 'else'}}
    assert len(result['automaton']['nodes']) == len(dangling_else_grammar.states)
