from linguist.flashcards import DECK_SIZE, FlashcardSession, score_session
from linguist.schemas import Word


def _words(count):
    return [
        Word(id=f"w{index}", word=f"word{index}", child_id="c", user_id="u", date_learned="2025-01-01")
        for index in range(count)
    ]


def test_session_walks_deck_and_scores():
    session = FlashcardSession(_words(3))

    assert session.current.id == "w0"
    assert session.flip() is True
    session.mark_correct()
    assert session.flipped is False
    session.mark_incorrect()
    session.mark_correct()

    assert session.finished is True
    assert session.current is None
    summary = session.summary()
    assert summary.reviewed == 3
    assert summary.correct == 2
    assert summary.total == 3
    assert summary.accuracy == 67


def test_previous_reopens_finished_deck():
    session = FlashcardSession(_words(2))
    session.next()
    session.next()

    assert session.finished is True
    assert session.previous().id == "w0"
    assert session.finished is False


def test_reset_clears_progress():
    session = FlashcardSession(_words(2))
    session.mark_correct()
    session.reset()

    assert session.current.id == "w0"
    assert session.summary().reviewed == 0


def test_deck_is_capped_and_empty_deck_is_finished():
    assert len(FlashcardSession(_words(DECK_SIZE + 5)).words) == DECK_SIZE
    empty = FlashcardSession([])
    assert empty.finished is True
    assert empty.current is None
    assert empty.mark_correct() is None


def test_score_ignores_ids_outside_deck():
    summary = score_session(_words(4), ["w0", "w1", "other"], ["w1", "w2", "nope"])

    assert summary.reviewed == 3
    assert summary.correct == 2
    assert summary.total == 4
    assert summary.accuracy == 50
