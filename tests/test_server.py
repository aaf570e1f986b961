import pytest

from server import app


DANGLING_ELSE_TEXT = "S -> if c then S\nS -> if c then S else S\nS -> x"


@pytest.fixture
def client():
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def test_parse_grammar_productions(client):
    response = client.post('/parse-grammar-productions', json={'grammar': "E -> E + T\nE -> T\nT -> id"})
    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['start_symbols'] == ['E', 'T']
    assert body['productions'] == ["E -> E + T", "E -> T", "T -> id"]


def test_build_automaton(client):
    response = client.post('/build-automaton', json={'grammar': DANGLING_ELSE_TEXT})
    assert response.status_code == 200
    body = response.get_json()

    assert body['startSymbol'] == 'S'
    assert len(body['nodes']) == 10
    assert body['nodes'][0]['id'] == 'state-0'
    assert body['nodes'][0]['data']['label'].split('\n')[0] == "$accept → ↑ S $"
    assert {edge['data']['label'] for edge in body['edges']} == {'S', 'if', 'x', '$', 'c', 'then', 'else'}
    assert body['conflictStates'] == {'7': {'conflictType': 'shift/reduce', 'conflictToken': 'else'}}
    assert body['conflicts'][0]['rules'] == [1]
    assert body['automatonInfo']['accept_state'] == 4
    assert body['automatonDot'].startswith('digraph')


def test_build_automaton_with_start_symbol(client):
    response = client.post('/build-automaton', json={
        'grammar': "E -> E + T\nE -> T\nT -> id",
        'start_symbol': 'T',
    })
    assert response.status_code == 200
    assert response.get_json()['productions'][0] == "$accept -> T $"


def test_first_follow(client):
    response = client.post('/first-follow', json={'grammar': DANGLING_ELSE_TEXT})
    assert response.status_code == 200
    body = response.get_json()
    assert body['firstSets']['S'] == ['if', 'x']
    assert body['firstSets']['else'] == ['else']
    assert body['followSets']['S'] == ['$', 'else']
    assert body['followSets']['$accept'] == ['$']


def test_missing_grammar(client):
    response = client.post('/build-automaton', json={})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'No grammar provided'}

    response = client.post('/first-follow', data='not json', content_type='text/plain')
    assert response.status_code == 400


@pytest.mark.parametrize('payload', [{'grammar': ["S -> a"]}, {'grammar': 42}, ["S -> a"]])
def test_non_string_grammar(client, payload):
    response = client.post('/build-automaton', json=payload)
    assert response.status_code == 400
    assert response.get_json() == {'error': 'No grammar provided'}


def test_malformed_rule(client):
    response = client.post('/build-automaton', json={'grammar': "S -> a\nA B C"})
    assert response.status_code == 400
    body = response.get_json()
    assert body['success'] is False
    assert body['error_type'] == 'malformed_rule'
    assert body['line'] == 'A B C'
    assert '<code>A B C</code>' in body['errorHtml']


def test_unknown_start_symbol(client):
    response = client.post('/build-automaton', json={'grammar': "S -> a", 'start_symbol': 'Q'})
    assert response.status_code == 400
    assert response.get_json()['error_type'] == 'workflow_error'
