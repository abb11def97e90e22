import json

import pytest

from errors import InvalidSchema, MalformedResponse
from response_parser import extract_json_object, parse_quiz_response, strip_code_fences

FENCED = (
    '```json\n{"title":"T","quiz":[{"question":"Q","options":["A","B"],'
    '"answer":"A","difficulty":"easy","explanation":"E"}]}\n```'
)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```JSON {"a": 1}```') == '{"a": 1}'
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


def test_extract_json_object_slices_outer_braces():
    text = 'Sure! Here it is: {"a": {"b": 1}} Hope that helps {:'
    assert extract_json_object(text) == '{"a": {"b": 1}}'


@pytest.mark.parametrize("text", ["", "no json here", "} backwards {"])
def test_extract_json_object_without_object(text):
    with pytest.raises(MalformedResponse):
        extract_json_object(text)


def test_fenced_response(article):
    draft = parse_quiz_response(FENCED, article)
    assert draft.title == "T"
    assert len(draft.quiz) == 1
    assert draft.quiz[0].answer == "A"
    assert draft.summary == article.extract[:200] + "..."


def test_prose_around_fence_matches_bare_json(article, quiz_payload):
    bare = json.dumps(quiz_payload)
    wrapped = f"Here is your quiz:\n```json\n{bare}\n```\nLet me know if you need more!"
    assert parse_quiz_response(wrapped, article) == parse_quiz_response(bare, article)


def test_invalid_json_is_malformed(article):
    with pytest.raises(MalformedResponse):
        parse_quiz_response('{"title": "T", "quiz": [,]}', article)


@pytest.mark.parametrize(
    "raw",
    [
        '{"quiz": []}',
        '{"title": "", "quiz": []}',
        '{"title": "T"}',
        '{"title": "T", "quiz": "none"}',
        '{"title": "T", "quiz": [], "sections": "Intro"}',
    ],
)
def test_schema_violations(article, raw):
    with pytest.raises(InvalidSchema):
        parse_quiz_response(raw, article)


def test_defaults_for_missing_optional_fields(article):
    draft = parse_quiz_response('{"title": "T", "quiz": []}', article)
    assert draft.summary == article.extract[:200] + "..."
    assert draft.key_entities.model_dump() == {"people": [], "organizations": [], "locations": []}
    assert draft.sections == []
    assert draft.related_topics == []
    assert draft.quiz == []


def test_partial_key_entities_are_filled(article):
    draft = parse_quiz_response('{"title": "T", "quiz": [], "key_entities": {"people": ["Ada"]}}', article)
    assert draft.key_entities.people == ["Ada"]
    assert draft.key_entities.organizations == []
    assert draft.key_entities.locations == []


def test_null_fields_get_defaults(article):
    raw = '{"title": "T", "quiz": [], "summary": null, "sections": null, "key_entities": null}'
    draft = parse_quiz_response(raw, article)
    assert draft.summary.endswith("...")
    assert draft.sections == []
    assert draft.key_entities.people == []


def test_full_payload_is_kept(article, quiz_payload):
    draft = parse_quiz_response(json.dumps(quiz_payload), article)
    assert draft.model_dump() == quiz_payload


def _question(**overrides):
    q = {"question": "Q", "options": ["Alpha", "Beta"], "answer": "Alpha",
         "difficulty": "easy", "explanation": "E"}
    q.update(overrides)
    return q


def test_difficulty_is_normalized(article):
    raw = json.dumps({"title": "T", "quiz": [_question(difficulty=" Hard ")]})
    assert parse_quiz_response(raw, article).quiz[0].difficulty == "hard"


def test_answer_is_reconciled_to_option(article):
    raw = json.dumps({"title": "T", "quiz": [_question(answer=" alpha")]})
    assert parse_quiz_response(raw, article).quiz[0].answer == "Alpha"


def test_unscorable_questions_are_dropped(article):
    quiz = [
        _question(),
        _question(answer="Gamma"),
        _question(options=["Only"], answer="Only"),
        _question(difficulty="impossible"),
        "not a question",
    ]
    draft = parse_quiz_response(json.dumps({"title": "T", "quiz": quiz}), article)
    assert len(draft.quiz) == 1
    assert draft.quiz[0].answer == "Alpha"
