"""
Answer History Tests.
Tests recording, filtering, deletion and stats.
"""
from phonecam.core.history import AnswerHistory, HistoryMode
from phonecam.core.models import Answer, Question


def make_answer(text: str, answered_at: float = 0.0) -> Answer:
    return Answer(question=Question(text=text), answer_text=f"A: {text}", answered_at=answered_at)


class TestAnswerHistory:

    def test_record_newest_first(self):
        history = AnswerHistory()
        history.record(make_answer("first", 1.0))
        history.record(make_answer("second", 2.0))

        items = history.query()
        assert [i.question for i in items] == ["second", "first"]
        assert items[0].answer == "A: second"
        assert items[0].timestamp == 2.0

    def test_filter_by_mode(self):
        history = AnswerHistory()
        history.record(make_answer("scan"))
        history.record(make_answer("cam"), mode=HistoryMode.WEBCAM)

        assert [i.question for i in history.query(mode=HistoryMode.SCANNER)] == ["scan"]
        assert [i.question for i in history.query(mode=HistoryMode.WEBCAM)] == ["cam"]
        assert len(history.query(limit=1)) == 1

    def test_get_and_delete(self):
        history = AnswerHistory()
        item = history.record(make_answer("q"))

        assert history.get(item.id) == item
        assert history.delete(item.id) is True
        assert history.get(item.id) is None
        assert history.delete(item.id) is False

    def test_clear(self):
        history = AnswerHistory()
        history.record(make_answer("a"))
        history.record(make_answer("b"))

        assert history.clear() == 2
        assert len(history) == 0

    def test_max_items(self):
        history = AnswerHistory(max_items=2)
        for text in ("a", "b", "c"):
            history.record(make_answer(text))
        assert [i.question for i in history.query()] == ["c", "b"]

    def test_stats(self):
        history = AnswerHistory()
        history.record(make_answer("a", 5.0))
        history.record(make_answer("b", 6.0), mode=HistoryMode.WEBCAM)

        stats = history.stats()
        assert stats["total_count"] == 2
        assert stats["by_mode"] == {"scanner": 1, "webcam": 1}
        assert stats["latest"] == 6.0
