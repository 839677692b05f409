import json
from types import SimpleNamespace

from linguist import openai_client, suggestions
from linguist.schemas import Word, WordCategory, WordSuggestion
from linguist.suggestions import build_suggestions, category_gaps, starter_suggestions

FAMILY = WordCategory(id="cat-family", name="Family")
FOOD = WordCategory(id="cat-food", name="Food")
COLORS = WordCategory(id="cat-colors", name="Colors")


def _word(text, category_id=None):
    return Word(
        id=f"id-{text}",
        word=text,
        category_id=category_id,
        child_id="c",
        user_id="u",
        date_learned="2025-01-01",
    )


def test_category_gaps_rank_high_severity_first():
    words = [_word("mama", FAMILY.id), _word("dada", FAMILY.id), _word("red", COLORS.id), _word("blue", COLORS.id)]

    gaps = category_gaps(words, [FAMILY, FOOD, COLORS])

    names = [gap.category for gap in gaps]
    assert "Colors" not in names
    assert names[:2] == ["Food", "Animals"]
    family = next(gap for gap in gaps if gap.category == "Family")
    assert family.current == 2
    assert family.needed == 2
    assert all(gap.severity == "high" for gap in gaps[:4])


def test_starter_suggestions_skip_known_words():
    gaps = category_gaps([], [])

    picks = starter_suggestions(["Mama", "apple"], gaps, limit=5)

    words = [item.word for item in picks]
    assert len(words) == 5
    assert "mama" not in words
    assert "apple" not in words
    assert words[0] == "milk"


def test_build_suggestions_falls_back_without_model(monkeypatch):
    monkeypatch.setattr(suggestions, "generate_word_suggestions", lambda *args, **kwargs: None)

    response = build_suggestions([_word("dog")], [FAMILY], limit=3)

    assert len(response.suggestions) == 3
    assert "dog" not in [item.word for item in response.suggestions]
    assert response.missing_categories


def test_build_suggestions_drops_known_model_words(monkeypatch):
    generated = [
        WordSuggestion(word="dog", category="Animals", priority="high"),
        WordSuggestion(word="duck", category="Animals", priority="high"),
    ]
    monkeypatch.setattr(suggestions, "generate_word_suggestions", lambda *args, **kwargs: generated)

    response = build_suggestions([_word("Dog")], [])

    assert [item.word for item in response.suggestions] == ["duck"]


class _Completions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(content):
    completions = _Completions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_generate_word_suggestions_parses_model_json(monkeypatch):
    content = json.dumps(
        {
            "suggestions": [
                {"word": " Banana ", "category": "Food", "priority": "HIGH"},
                {"word": "", "category": "Food"},
                {"word": "jump", "category": "Actions", "priority": "urgent"},
            ]
        }
    )
    client, completions = _fake_client(content)
    monkeypatch.setattr(openai_client, "_client", lambda: client)

    result = openai_client.generate_word_suggestions(["mama"], category_gaps([], []), limit=5)

    assert [(item.word, item.priority) for item in result] == [("banana", "high"), ("jump", "medium")]
    assert completions.kwargs["response_format"] == {"type": "json_object"}
    assert "mama" in completions.kwargs["messages"][1]["content"]


def test_generate_word_suggestions_bad_json_returns_none(monkeypatch, caplog):
    client, _ = _fake_client("not json")
    monkeypatch.setattr(openai_client, "_client", lambda: client)

    assert openai_client.generate_word_suggestions([], []) is None
    assert "Failed to parse OpenAI JSON payload" in caplog.text


def test_generate_word_suggestions_without_key(monkeypatch):
    monkeypatch.setattr(openai_client, "_client", lambda: None)

    assert openai_client.generate_word_suggestions([], []) is None
