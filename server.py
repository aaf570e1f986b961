import os
import sys
import traceback
from flask import Flask, request, jsonify

from cfg_analyzer import GrammarWorkflowManager, END_MARKER
from visualization import ConflictReportFormatter

app = Flask(__name__)
app.config.setdefault('END_MARKER', END_MARKER)
app.json.ensure_ascii = False

# --- HTML Escape Helper ---
def escapeHtml(unsafe):
    if unsafe is None: return ''
    unsafe = str(unsafe)
    return unsafe.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;').replace('"', '&quot;').replace("'", '&#039;')

# --- Request Helpers ---
def _read_grammar_request():
    """Return (grammar_text, start_symbol, error_response)."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    grammar_input = data.get('grammar')
    start_symbol = data.get('start_symbol') or None

    if not isinstance(grammar_input, str) or not grammar_input.strip():
        return None, None, (jsonify({"error": "No grammar provided"}), 400)
    return grammar_input, start_symbol, None

def _grammar_failure(result):
    print("--- Grammar Processing FAILED ---", file=sys.stderr)
    print(f"Error: {result['error']}", file=sys.stderr)
    payload = {
        "success": False,
        "error": result['error'],
        "error_type": result.get('error_type', 'grammar_error')
    }
    if 'line' in result:
        payload['line'] = result['line']
    payload['errorHtml'] = ConflictReportFormatter().format_grammar_error(result['error'], result.get('line'))
    return jsonify(payload), 400

def _unexpected_failure(e):
    print(f"--- UNEXPECTED Python Error: {e} ---", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)
    error_message = f"Unexpected server error: {escapeHtml(str(e))}"
    return jsonify({"error": error_message, "error_type": "system_error"}), 500

def _build(grammar_input, start_symbol):
    """Run the workflow up to the automaton; returns (result, error_response)."""
    workflow_manager = GrammarWorkflowManager(grammar_input, end_marker=app.config['END_MARKER'])

    productions_result = workflow_manager.parse_productions()
    if not productions_result['success']:
        return None, _grammar_failure(productions_result)

    result = workflow_manager.set_start_symbol(start_symbol)
    if not result['success']:
        return None, _grammar_failure(result)
    return result, None

# --- Flask Endpoints ---

@app.route('/parse-grammar-productions', methods=['POST'])
def parse_grammar_productions():
    """
    Parse grammar input and return the list of rules and potential start symbols.

    This endpoint is the first step of the interactive workflow: users see
    their rules before choosing which non-terminal the automaton starts from.
    """
    grammar_input, _, error_response = _read_grammar_request()
    if error_response:
        return error_response

    try:
        print("--- Parsing Grammar Productions ---", file=sys.stderr)

        workflow_manager = GrammarWorkflowManager(grammar_input, end_marker=app.config['END_MARKER'])
        result = workflow_manager.parse_productions()

        if not result['success']:
            return _grammar_failure(result)

        print("--- Production Parsing SUCCEEDED ---", file=sys.stderr)
        print(f"Found {len(result['productions'])} productions", file=sys.stderr)
        print(f"Potential start symbols: {result['start_symbols']}", file=sys.stderr)

        return jsonify({
            "success": True,
            "productions": result['productions'],
            "start_symbols": result['start_symbols'],
            "grammar_info": result['grammar_info']
        })

    except Exception as e:
        return _unexpected_failure(e)

@app.route('/build-automaton', methods=['POST'])
def build_automaton():
    """
    Build the LR(0) automaton for the grammar and selected start symbol.

    Returns the layout-ready node/edge list, per-state conflict annotations,
    the full conflict list and a DOT rendering of the automaton.
    """
    grammar_input, start_symbol, error_response = _read_grammar_request()
    if error_response:
        return error_response

    try:
        print("--- Building Automaton ---", file=sys.stderr)
        print(f"Start symbol: {start_symbol or '(first rule)'}", file=sys.stderr)

        result, error_response = _build(grammar_input, start_symbol)
        if error_response:
            return error_response

        info = result['automaton_info']
        print("--- Automaton Building SUCCEEDED ---", file=sys.stderr)
        print(f"States created: {info['states_count']}", file=sys.stderr)
        print(f"Transitions: {info['transitions_count']}", file=sys.stderr)
        if result['conflicts']:
            print(f"Conflicts detected: {info['conflicts_count']}", file=sys.stderr)

        return jsonify({
            "success": True,
            "startSymbol": result['start_symbol'],
            "productions": result['productions'],
            "nodes": result['automaton']['nodes'],
            "edges": result['automaton']['edges'],
            "conflicts": result['conflicts'],
            "conflictStates": result['conflict_states'],
            "conflictReport": result['conflicts_text'],
            "conflictReportHtml": result['conflicts_html'],
            "automatonDot": result['dot'],
            "automatonInfo": info
        })

    except Exception as e:
        return _unexpected_failure(e)

@app.route('/first-follow', methods=['POST'])
def first_follow():
    """Return FIRST and FOLLOW sets of the augmented grammar."""
    grammar_input, start_symbol, error_response = _read_grammar_request()
    if error_response:
        return error_response

    try:
        print("--- Computing FIRST/FOLLOW Sets ---", file=sys.stderr)

        result, error_response = _build(grammar_input, start_symbol)
        if error_response:
            return error_response

        return jsonify({
            "success": True,
            "startSymbol": result['start_symbol'],
            "firstSets": result['first_sets'],
            "followSets": result['follow_sets']
        })

    except Exception as e:
        return _unexpected_failure(e)

# --- Main Execution ---
if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    print("--- LR(0) Automaton Visualizer Server ---")
    print(f"Running on http://127.0.0.1:{port}")
    print("-" * 34)
    app.run(debug=True, port=port, use_reloader=False)
