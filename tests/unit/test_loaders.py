import json

import pytest

from theory_atlas.models import InvalidInputError


def test_load_models_sorted_by_year(content_dir):
    from theory_atlas.data.loaders import load_models
    models = load_models(content_dir)
    assert [m.id for m in models] == ['tam', 'ecm-is']
    tam = models[0]
    assert tam.construct_abbreviations['Perceived Usefulness'] == 'PU'
    assert [(r.source, r.target) for r in tam.relationships][0] == ('PEOU', 'PU')
    assert tam.key_citations[0].doi_url == 'https://doi.org/10.2307/249008'
    assert models[1].diagram_type == 'ecm-is'
    assert models[1].notes


def test_normalize_model_defaults():
    from theory_atlas.data.loaders import normalize_model
    m = normalize_model({'id': 'x', 'name': 'X'})
    assert m.constructs == [] and m.relationships == [] and m.key_citations == []
    assert m.year is None and m.diagram_type is None


def test_normalize_model_requires_id_and_name():
    from theory_atlas.data.loaders import normalize_model
    with pytest.raises(InvalidInputError):
        normalize_model({'name': 'No id'})


def test_relationship_without_endpoint_rejected():
    from theory_atlas.data.loaders import normalize_model
    with pytest.raises(InvalidInputError):
        normalize_model({'id': 'x', 'name': 'X', 'relationships': [{'from': 'A'}]})


def test_bad_json_names_the_file(content_dir):
    from theory_atlas.data.loaders import load_models
    (content_dir / 'models' / 'broken.json').write_text('{not json', encoding='utf-8')
    with pytest.raises(InvalidInputError) as exc:
        load_models(content_dir)
    assert 'broken.json' in str(exc.value)


def test_construct_slug_map(content_dir):
    from theory_atlas.data.loaders import construct_slug_map, load_constructs
    slugs = construct_slug_map(load_constructs(content_dir))
    assert slugs == {'Perceived Usefulness': 'perceived-usefulness', 'Satisfaction': 'satisfaction'}


def test_load_diary_seed(content_dir, tmp_path):
    from theory_atlas.data.loaders import load_diary_seed
    entries = load_diary_seed(content_dir)
    assert [e.id for e in entries] == ['d1', 'd2']
    assert entries[0].detailed_reflection == 'TAM origins'
    assert load_diary_seed(tmp_path / 'missing') == []


def test_load_diary_seed_rejects_non_list(content_dir):
    from theory_atlas.data.loaders import load_diary_seed
    (content_dir / 'diary.json').write_text(json.dumps({'id': 'd1'}), encoding='utf-8')
    with pytest.raises(InvalidInputError):
        load_diary_seed(content_dir)


def test_non_object_relationship_and_citation_rejected():
    from theory_atlas.data.loaders import normalize_model
    with pytest.raises(InvalidInputError):
        normalize_model({'id': 'x', 'name': 'X', 'relationships': ['PU->BI']})
    with pytest.raises(InvalidInputError):
        normalize_model({'id': 'x', 'name': 'X', 'keyCitations': ['Davis 1989']})


def test_non_numeric_year_rejected():
    from theory_atlas.data.loaders import normalize_model
    with pytest.raises(InvalidInputError) as exc:
        normalize_model({'id': 'x', 'name': 'X', 'year': 'c. 1989'})
    assert 'c. 1989' in str(exc.value)
    assert normalize_model({'id': 'x', 'name': 'X', 'year': '1989'}).year == 1989


def test_undecodable_model_file_names_the_file(content_dir):
    from theory_atlas.data.loaders import load_models
    (content_dir / 'models' / 'latin1.json').write_bytes(b'{"id": "x", "name": "Caf\xe9"}')
    with pytest.raises(InvalidInputError) as exc:
        load_models(content_dir)
    assert 'latin1.json' in str(exc.value)
