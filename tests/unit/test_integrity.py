import pytest

from bloginno.components.integrity import articles_using, can_delete, ensure_can_delete
from bloginno.domain.entities import Article
from bloginno.domain.errors import Conflict


def make_article(article_id, category):
    return Article(
        id=article_id, title="t", summary="s", content="c", date="d",
        read_time="r", category=category,
    )


ARTICLES = [make_article(1, "innovation"), make_article(2, "innovation"), make_article(3, "project")]


def test_can_delete_iff_unused():
    assert not can_delete("innovation", ARTICLES)
    assert not can_delete("project", ARTICLES)
    assert can_delete("update", ARTICLES)
    assert can_delete("innovation", [])


def test_articles_using():
    assert [a.id for a in articles_using("innovation", ARTICLES)] == [1, 2]


def test_ensure_can_delete_reports_count():
    with pytest.raises(Conflict) as exc:
        ensure_can_delete("innovation", ARTICLES)
    assert "2 article(s)" in str(exc.value)
    assert exc.value.target_id == "innovation"

    ensure_can_delete("update", ARTICLES)
