"""
Visualization and Output Formatting Module

This module turns the LR(0) automaton produced by ``cfg_analyzer`` into the
shapes consumed by the front-end: a positioned node/edge list for the flow
canvas, per-state conflict annotations, a DOT rendering of the automaton and
text/HTML conflict reports.
"""

from typing import Dict, List, Tuple, Optional, Any
from dataclasses import dataclass
import html

from cfg_analyzer import LR0Automaton, Conflict, Grammar, TransitionKind


@dataclass
class VisualizationConfig:
    """Configuration options for visualization output."""
    conflict_css_classes: str = "conflict-report"
    error_css_classes: str = "error-message"
    include_inline_styles: bool = True
    compact_mode: bool = False
    max_label_items: int = 0  # 0 shows every item in DOT labels


@dataclass
class LayoutConfig:
    """Geometry of the layered automaton layout."""
    node_spacing_x: float = 400
    node_spacing_y: float = 400
    canvas_width: float = 10000
    canvas_height: float = 10000
    node_type: str = "custom"
    edge_type: str = "custom"
    empty_label: str = "New State"

    @property
    def center_x(self) -> float:
        return self.canvas_width / 2

    @property
    def center_y(self) -> float:
        return self.canvas_height / 2


def state_node_id(state_index: int) -> str:
    return f"state-{state_index}"


def summarize_conflicts(conflicts: List[Conflict]) -> Dict[int, Dict[str, str]]:
    """
    Reduce a conflict list to one annotation per conflicted state.

    The first conflict reported for a state decides its ``conflictType`` and
    representative ``conflictToken``.
    """
    summary: Dict[int, Dict[str, str]] = {}
    for conflict in conflicts:
        if conflict.state not in summary:
            summary[conflict.state] = {
                'conflictType': conflict.type.value,
                'conflictToken': conflict.symbol,
            }
    return summary


class FlowLayoutGenerator:
    """Lays out automaton states in breadth-first layers for the flow canvas."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def generate_automaton_data(self, automaton: LR0Automaton,
                                conflicts: Optional[List[Conflict]] = None) -> Dict[str, List[Dict[str, Any]]]:
        """
        Generate nodes and edges for the automaton.

        Args:
            automaton: Finished LR0Automaton
            conflicts: Optional conflict list; conflicted nodes get
                ``conflictType``/``conflictToken`` in their data

        Returns:
            Dictionary with ``nodes`` (in layer order) and ``edges`` (in
            transition order)
        """
        annotations = summarize_conflicts(conflicts or [])
        layers = self.compute_layers(automaton)

        spacing_x = self.config.node_spacing_x
        spacing_y = self.config.node_spacing_y
        total_height = (len(layers) - 1) * spacing_y
        initial_y = self.config.center_y - total_height / 2

        nodes = []
        for layer_index, layer in enumerate(layers):
            total_layer_width = (len(layer) - 1) * spacing_x
            start_x = self.config.center_x - total_layer_width / 2

            for node_index, state_index in enumerate(layer):
                label = str(automaton.states[state_index])
                data: Dict[str, Any] = {'label': label or self.config.empty_label}
                if state_index in annotations:
                    data.update(annotations[state_index])

                nodes.append({
                    'id': state_node_id(state_index),
                    'type': self.config.node_type,
                    'position': {
                        'x': start_x + node_index * spacing_x,
                        'y': initial_y + layer_index * spacing_y,
                    },
                    'data': data,
                })

        edges = []
        for index, transition in enumerate(automaton.transitions):
            edges.append({
                'id': f"edge-{index}",
                'source': state_node_id(transition.source),
                'target': state_node_id(transition.target),
                'type': self.config.edge_type,
                'data': {'label': transition.symbol},
            })

        return {'nodes': nodes, 'edges': edges}

    def compute_layers(self, automaton: LR0Automaton) -> List[List[int]]:
        """
        Group state indices by breadth-first distance from the start state.

        Successors are visited in transition order; a state lands in the layer
        where it is first dequeued.
        """
        successors: Dict[int, List[int]] = {}
        for transition in automaton.transitions:
            successors.setdefault(transition.source, []).append(transition.target)

        layers: List[List[int]] = []
        visited = set()
        queue: List[Tuple[int, int]] = [(automaton.start_state, 0)]
        position = 0

        while position < len(queue):
            state_index, layer = queue[position]
            position += 1
            if state_index in visited:
                continue
            visited.add(state_index)

            if layer == len(layers):
                layers.append([])
            layers[layer].append(state_index)

            for target in successors.get(state_index, []):
                if target not in visited:
                    queue.append((target, layer + 1))

        return layers


class DOTGenerator:
    """Generates DOT format output for LR(0) automata."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def generate_automaton_dot(self, automaton: LR0Automaton, title: str = "LR(0) Automaton",
                               conflicts: Optional[List[Conflict]] = None) -> str:
        """
        Generate DOT format representation of an LR(0) automaton.

        Args:
            automaton: LR0Automaton object
            title: Title for the graph
            conflicts: Optional conflict list used to highlight states

        Returns:
            DOT format string
        """
        conflicted = summarize_conflicts(conflicts or [])
        lines = []

        # Graph header
        lines.append(f'digraph "{self._escape_dot_string(title)}" {{')
        lines.append('  rankdir=LR;')
        lines.append('  node [shape=box, fontname="Arial", fontsize=8];')
        lines.append('  edge [fontname="Arial", fontsize=8];')

        # Add states
        for index, state in enumerate(automaton.states):
            attributes = [f'label="{self._format_state_label(index, state)}"']
            if index == automaton.start_state:
                attributes.append('style=bold')
            if index == automaton.accept_state:
                attributes.append('peripheries=2')
            if index in conflicted:
                attributes.append('color=red')
            lines.append(f'  state{index} [{", ".join(attributes)}];')

        # Add transitions
        for transition in automaton.transitions:
            escaped_symbol = self._escape_dot_string(transition.symbol)
            style = '' if transition.kind is TransitionKind.SHIFT else ', style=dashed'
            lines.append(f'  state{transition.source} -> state{transition.target} '
                         f'[label="{escaped_symbol}"{style}];')

        lines.append('}')

        return '\n'.join(lines)

    def _format_state_label(self, index: int, state) -> str:
        """Format an LR(0) state for DOT display."""
        if self.config.compact_mode:
            return str(index)

        items_text = []
        for i, item in enumerate(state.items):
            if self.config.max_label_items and i >= self.config.max_label_items:
                items_text.append("...")
                break
            items_text.append(str(item))

        return self._escape_dot_string(f"State {index}\n" + "\n".join(items_text))

    def _escape_dot_string(self, text: str) -> str:
        """Escape a string for use in DOT format."""
        if not text:
            return ""

        text = str(text)
        text = text.replace('\\', '\\\\')
        text = text.replace('"', '\\"')
        text = text.replace('\n', '\\n')
        text = text.replace('\t', '\\t')
        text = text.replace('\r', '\\r')

        return text


class ConflictReportFormatter:
    """Formats conflict reports and grammar errors."""

    def __init__(self, config: Optional[VisualizationConfig] = None):
        self.config = config or VisualizationConfig()

    def format_conflict_report(self, conflicts: List[Conflict], grammar: Grammar) -> str:
        """
        Generate a plain-text report of all conflicts.

        Args:
            conflicts: Conflicts detected on ``grammar``
            grammar: Grammar the conflicts refer to, used to print rules and items

        Returns:
            String containing the conflict analysis
        """
        if not conflicts:
            return "No conflicts detected in the grammar."

        lines = [f"Found {len(conflicts)} conflict(s) in the LR(0) automaton:\n"]

        for i, conflict in enumerate(conflicts, 1):
            lines.append(f"Conflict {i}: {conflict}")
            lines.append(f"  State {conflict.state} items:")
            for item in grammar.states[conflict.state].items:
                lines.append(f"    {item}")

            lines.append("  Rules involved:")
            for rule_index in conflict.rules:
                lines.append(f"    ({rule_index}) {grammar.rule_to_string(rule_index)}")
            lines.append(f"  Lookahead intersection: {{{', '.join(conflict.intersection)}}}")
            lines.append("")

        return "\n".join(lines)

    def format_conflict_report_html(self, conflicts: List[Conflict], grammar: Grammar) -> str:
        """
        Format a conflict report as HTML.

        Args:
            conflicts: List of Conflict objects
            grammar: Grammar the conflicts refer to

        Returns:
            Formatted HTML conflict report
        """
        if not conflicts:
            return '<div class="no-conflicts">No conflicts detected in the grammar.</div>'

        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_error_styles())

        html_lines.append(f'<div class="{self.config.conflict_css_classes}">')
        html_lines.append(f'<h4>Grammar Conflicts ({len(conflicts)} found)</h4>')

        for i, conflict in enumerate(conflicts, 1):
            html_lines.append('<div class="conflict-item">')
            html_lines.append(f'<h5>Conflict {i}: {html.escape(conflict.type.value)}</h5>')
            html_lines.append(f'<p><strong>State:</strong> {conflict.state}</p>')
            html_lines.append(f'<p><strong>Symbol:</strong> {html.escape(conflict.symbol)}</p>')
            html_lines.append('<p><strong>Rules:</strong></p>')
            html_lines.append('<ul>')
            for rule_index in conflict.rules:
                rule_text = html.escape(grammar.rule_to_string(rule_index))
                html_lines.append(f'<li>({rule_index}) {rule_text}</li>')
            html_lines.append('</ul>')
            intersection = html.escape(", ".join(conflict.intersection))
            html_lines.append(f'<p><strong>Lookahead intersection:</strong> {intersection}</p>')
            html_lines.append('</div>')

        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def format_grammar_error(self, error_message: str, line: Optional[str] = None) -> str:
        """Format a grammar construction error as HTML, quoting the offending line."""
        html_lines = []

        if self.config.include_inline_styles:
            html_lines.append(self._generate_error_styles())

        html_lines.append(f'<div class="{self.config.error_css_classes}">')
        html_lines.append('<h4>Grammar Error</h4>')
        html_lines.append(f'<p class="error-text">{html.escape(error_message)}</p>')
        if line:
            html_lines.append(f'<p><strong>Line:</strong> <code>{html.escape(line)}</code></p>')
        html_lines.append('</div>')

        return '\n'.join(html_lines)

    def _generate_error_styles(self) -> str:
        """Generate inline CSS styles for error messages."""
        return """
<style>
.error-message {
    color: #cc0000;
    background-color: #ffeeee;
    border: 1px solid #cc0000;
    border-radius: 4px;
    padding: 10px;
    margin: 10px 0;
    font-family: Arial, sans-serif;
}

.error-text {
    font-weight: bold;
    margin: 5px 0;
}

.conflict-report {
    background-color: #fff8e1;
    border: 1px solid #ff9800;
    border-radius: 4px;
    padding: 10px;
    margin: 10px 0;
}

.conflict-item {
    margin: 10px 0;
    padding: 8px;
    background-color: #ffffff;
    border-left: 3px solid #ff9800;
}
</style>
"""


class VisualizationGenerator:
    """Main visualization generator that combines all formatting capabilities."""

    def __init__(self, config: Optional[VisualizationConfig] = None,
                 layout_config: Optional[LayoutConfig] = None):
        self.config = config or VisualizationConfig()
        self.layout_generator = FlowLayoutGenerator(layout_config)
        self.dot_generator = DOTGenerator(self.config)
        self.conflict_formatter = ConflictReportFormatter(self.config)

    def generate_complete_visualization(self, grammar: Grammar,
                                        conflicts: Optional[List[Conflict]] = None) -> Dict[str, Any]:
        """
        Generate complete visualization output for a built grammar.

        Args:
            grammar: Grammar with a finished automaton
            conflicts: Conflicts of ``grammar``; detected here when omitted

        Returns:
            Dictionary with keys: 'automaton', 'conflict_states', 'dot',
            'conflicts_text', 'conflicts_html'
        """
        if conflicts is None:
            conflicts = grammar.detect_conflicts()

        return {
            'automaton': self.layout_generator.generate_automaton_data(grammar.automaton, conflicts),
            'conflict_states': {
                str(state): annotation
                for state, annotation in summarize_conflicts(conflicts).items()
            },
            'dot': self.dot_generator.generate_automaton_dot(grammar.automaton, conflicts=conflicts),
            'conflicts_text': self.conflict_formatter.format_conflict_report(conflicts, grammar),
            'conflicts_html': self.conflict_formatter.format_conflict_report_html(conflicts, grammar),
        }
