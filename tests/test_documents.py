"""Tests for document grouping and prompt summaries (Layer 1d)."""

from archive_audio.documents import (
    create_content_summary,
    create_document_summary,
    document_focus_sets,
    group_related_documents,
    unique_documents,
)
from archive_audio.models import Article, DocumentInput


def test_unique_documents_keeps_first():
    docs = [
        DocumentInput(document_id="a", page_number=1),
        DocumentInput(document_id="a", page_number=2),
        DocumentInput(document_id=""),
        DocumentInput(document_id="b"),
    ]
    result = unique_documents(docs)
    assert [d.document_id for d in result] == ["a", "b"]
    assert result[0].page_number == 1


def test_group_related_documents(sample_documents):
    groups, unrelated = group_related_documents(sample_documents)
    assert [[d.document_id for d in g] for g in groups] == [["doc-1", "doc-2"]]
    assert [d.document_id for d in unrelated] == ["doc-3"]


def test_group_by_place_and_date():
    docs = [
        DocumentInput(document_id="a", places=["Dallas"]),
        DocumentInput(document_id="b", dates=["1963-11-22"]),
        DocumentInput(document_id="c", places=["Dallas"], dates=["1963-11-22"]),
    ]
    groups, unrelated = group_related_documents(docs)
    # seeded by "a": only documents overlapping "a" itself join
    assert [[d.document_id for d in g] for g in groups] == [["a", "c"]]
    assert [d.document_id for d in unrelated] == ["b"]


def test_group_nothing_related():
    docs = [DocumentInput(document_id="a", names=["X"]), DocumentInput(document_id="b", names=["Y"])]
    groups, unrelated = group_related_documents(docs)
    assert groups == []
    assert [d.document_id for d in unrelated] == ["a", "b"]


def test_document_focus_sets(sample_documents):
    focus = document_focus_sets(sample_documents)
    assert [[d.document_id for d in f] for f in focus] == [["doc-1", "doc-2"], ["doc-3"]]


def test_document_summary(sample_documents):
    summary = create_document_summary(sample_documents + [sample_documents[0]])
    assert summary.count("Document: doc-1") == 1
    assert "People: Lee Oswald, Win Scott" in summary
    assert "Places: Mexico City" in summary
    assert "False Redactions (Hidden Text Found)" in summary
    assert "Hidden words: LIENVOY" in summary
    assert summary.count("\n---\n") == 2


def test_content_summary_truncates():
    articles = [Article(id="1", title="Long", content="x" * 2000), Article(id="2", content="short")]
    summary = create_content_summary(articles)
    assert "Title: Long" in summary
    assert "x" * 1500 + "..." in summary
    assert "x" * 1501 not in summary
    assert "Content: short" in summary
