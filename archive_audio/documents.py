"""Group documents by shared entities and render prompt summaries."""

from archive_audio.constants import ARTICLE_CONTENT_MAX_CHARS
from archive_audio.models import Article, DocumentInput


def unique_documents(documents: list[DocumentInput]) -> list[DocumentInput]:
    """First occurrence of each document id, in input order.

    Pages of the same document arrive as separate entries; entries without
    an id are dropped.
    """
    seen = set()
    result = []
    for doc in documents:
        if doc.document_id and doc.document_id not in seen:
            seen.add(doc.document_id)
            result.append(doc)
    return result


def _overlaps(a: DocumentInput, b: DocumentInput) -> bool:
    return (
        bool(set(a.names) & set(b.names))
        or bool(set(a.places) & set(b.places))
        or bool(set(a.dates) & set(b.dates))
    )


def group_related_documents(
    documents: list[DocumentInput],
) -> tuple[list[list[DocumentInput]], list[DocumentInput]]:
    """Split documents into related groups and unrelated singletons.

    A group is seeded by the first unused document and collects every later
    unused document that shares a name, place or date with the seed. Groups
    of one are reported as unrelated.
    """
    docs = unique_documents(documents)
    used = set()
    related_groups = []

    for doc in docs:
        if doc.document_id in used:
            continue
        group = [doc]
        used.add(doc.document_id)

        for other in docs:
            if other.document_id in used:
                continue
            if _overlaps(doc, other):
                group.append(other)
                used.add(other.document_id)

        if len(group) > 1:
            related_groups.append(group)
        else:
            used.discard(doc.document_id)

    unrelated = [d for d in docs if d.document_id not in used]
    return related_groups, unrelated


def create_document_summary(documents: list[DocumentInput]) -> str:
    """Prompt text describing each distinct document once."""
    summaries = []
    seen = set()
    for doc in documents:
        if doc.document_id in seen:
            continue
        seen.add(doc.document_id)

        summary = f"Document: {doc.document_id}\n"
        if doc.summary:
            summary += f"Summary: {doc.summary}\n"
        if doc.names:
            summary += f"People: {', '.join(doc.names)}\n"
        if doc.places:
            summary += f"Places: {', '.join(doc.places)}\n"
        if doc.dates:
            summary += f"Dates: {', '.join(doc.dates)}\n"

        redactions = doc.false_redactions
        if redactions and redactions.found:
            summary += "\nFalse Redactions (Hidden Text Found):\n"
            if redactions.total_hidden_words:
                summary += f"Total hidden words recovered: {redactions.total_hidden_words}\n"
            if redactions.hidden_words:
                summary += f"Hidden words: {', '.join(redactions.hidden_words)}\n"
            if redactions.hidden_phrases:
                summary += f"Hidden phrases: {', '.join(redactions.hidden_phrases)}\n"

        summaries.append(summary)

    return "\n---\n".join(summaries)


def create_content_summary(articles: list[Article]) -> str:
    """Prompt text for articles, truncating long content."""
    summaries = []
    for article in articles:
        summary = ""
        if article.title:
            summary += f"Title: {article.title}\n"
        if article.summary:
            summary += f"Summary: {article.summary}\n"
        if article.content:
            content = article.content
            if len(content) > ARTICLE_CONTENT_MAX_CHARS:
                content = content[:ARTICLE_CONTENT_MAX_CHARS] + "..."
            summary += f"Content: {content}\n"
        summaries.append(summary)
    return "\n---\n".join(summaries)


def document_focus_sets(documents: list[DocumentInput]) -> list[list[DocumentInput]]:
    """Focus order for the report content loop: related groups, then singletons."""
    related_groups, unrelated = group_related_documents(documents)
    return related_groups + [[doc] for doc in unrelated]
