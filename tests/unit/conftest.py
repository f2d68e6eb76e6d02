import json
import logging

import pytest


TAM = {
    'id': 'tam',
    'name': 'Technology Acceptance Model',
    'abbreviation': 'TAM',
    'year': 1989,
    'authors': ['Davis'],
    'description': 'Usefulness and ease of use drive attitude and intention.',
    'constructs': ['Perceived Usefulness', 'Perceived Ease of Use', 'Behavioral Intention'],
    'constructAbbreviations': {
        'Perceived Usefulness': 'PU',
        'Perceived Ease of Use': 'PEOU',
        'Behavioral Intention': 'BI',
    },
    'relationships': [
        {'from': 'PEOU', 'to': 'PU'},
        {'from': 'PU', 'to': 'BI'},
        {'from': 'PEOU', 'to': 'BI'},
    ],
    'keyCitations': [
        {'authors': 'Davis, F. D.', 'title': 'Perceived usefulness, perceived ease of use', 'doi': '10.2307/249008'},
    ],
}

ECM = {
    'id': 'ecm-is',
    'name': 'Expectation-Confirmation Model',
    'abbreviation': 'ECM-IS',
    'year': 2001,
    'authors': ['Bhattacherjee'],
    'description': 'Post-adoption continuance.',
    'constructs': ['Confirmation', 'Perceived Usefulness', 'Satisfaction', 'Continuance Intention'],
    'constructAbbreviations': {'Perceived Usefulness': 'PU', 'Continuance Intention': 'CI'},
    'relationships': [
        {'from': 'Confirmation', 'to': 'PU'},
        {'from': 'Confirmation', 'to': 'Satisfaction'},
        {'from': 'PU', 'to': 'Satisfaction'},
        {'from': 'PU', 'to': 'CI'},
        {'from': 'Satisfaction', 'to': 'CI'},
    ],
    'keyCitations': [],
    'diagramType': 'ecm-is',
    'notes': 'PU also predicts CI directly.',
}

DIARY = [
    {'id': 'd1', 'date': '2024-03-01', 'summary': 'Read Davis 1989', 'detailedReflection': 'TAM origins',
     'tags': ['literature', 'theory'], 'linkedConstructs': ['Perceived Usefulness']},
    {'id': 'd2', 'date': '2024-03-05', 'summary': 'Supervisor meeting', 'detailedReflection': '',
     'tags': ['meeting', 'supervision'], 'linkedConstructs': []},
]


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / 'content'
    (root / 'models').mkdir(parents=True)
    (root / 'constructs').mkdir()
    (root / 'models' / 'ecm.json').write_text(json.dumps(ECM), encoding='utf-8')
    (root / 'models' / 'tam.json').write_text(json.dumps(TAM), encoding='utf-8')
    (root / 'constructs' / 'pu.json').write_text(
        json.dumps({'name': 'Perceived Usefulness', 'slug': 'perceived-usefulness'}), encoding='utf-8')
    (root / 'constructs' / 'sat.json').write_text(json.dumps({'name': 'Satisfaction'}), encoding='utf-8')
    (root / 'diary.json').write_text(json.dumps(DIARY), encoding='utf-8')
    return root


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
