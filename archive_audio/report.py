"""Investigative report: two investigators discuss a set of archive documents."""

import itertools
import logging
from typing import Iterator

from archive_audio.constants import DEFAULT_INVESTIGATORS, REPORT_TARGET_RATIO, TURNS_PER_GROUP
from archive_audio.dialogue import DialogueGenerator, ProgressCallback
from archive_audio.documents import create_document_summary, document_focus_sets, unique_documents
from archive_audio.errors import InvalidRequestError
from archive_audio.models import GenerationProgress, GenerationResult, Persona, ReportRequest
from archive_audio.text_generator import generate_investigator_comment

logger = logging.getLogger(__name__)


class ReportGenerator(DialogueGenerator):
    kind = "report"
    default_speakers = DEFAULT_INVESTIGATORS
    target_ratio = REPORT_TARGET_RATIO
    complete_message = "Investigation complete"

    def __init__(self, request: ReportRequest, **kwargs):
        super().__init__(request.selected_investigators, request.target_length_seconds, **kwargs)
        self.request = request
        self.documents = request.documents

    def validate(self) -> None:
        if not self.documents:
            raise InvalidRequestError("No documents provided")

    def content_id_parts(self) -> list[str]:
        doc_ids = ",".join(d.document_id or d.url or "doc" for d in self.documents)
        return [doc_ids, self.request.investigation, f"{self.speaker1.key},{self.speaker2.key}"]

    def overview(self) -> str:
        return create_document_summary(self.documents)

    def comment(self, persona: Persona, content: str, previous_comment=None, is_intro=False,
                is_outro=False, opening_line=None, closing_line=None) -> str:
        return generate_investigator_comment(
            persona,
            content,
            self.dialogue,
            self.request.investigation,
            previous_comment=previous_comment,
            is_intro=is_intro,
            is_outro=is_outro,
            opening_line=opening_line,
            closing_line=closing_line,
        )

    def focus_turns(self) -> Iterator[tuple[str, str]]:
        """Related groups, then single documents, cycling until the loop stops."""
        focus_sets = document_focus_sets(self.documents)
        if not focus_sets:
            # Every entry lacked a document id; discuss them all together.
            focus_sets = [self.documents]
        logger.debug("%d document focus sets", len(focus_sets))

        for i, group in itertools.cycle(enumerate(focus_sets)):
            label = f"Analyzing document group {i + 1} of {len(focus_sets)}"
            summary = create_document_summary(group)
            for _ in range(TURNS_PER_GROUP):
                yield label, summary

    def content_progress(self, speaker: Persona, label: str, step: int) -> GenerationProgress:
        return GenerationProgress("analyzing", label, current_step=step)

    def preparing_message(self) -> str:
        return f"{self.speaker1.name} and {self.speaker2.name} are beginning the investigation"

    def opening_message(self) -> str:
        return f"{self.speaker1.name} is setting the stage"

    def response_message(self) -> str:
        return f"{self.speaker2.name} is analyzing the evidence"

    def closing_message(self) -> str:
        return f"{self.speaker1.name} is wrapping up the investigation"

    def settings(self) -> dict:
        return {
            "investigation": self.request.investigation,
            "target_length_seconds": self.target_length_seconds,
            "documents": len(unique_documents(self.documents)),
        }


def generate_investigative_report(
    request: ReportRequest,
    on_progress: ProgressCallback | None = None,
    audio_dir: str | None = None,
    rng=None,
) -> GenerationResult:
    """Generate (or fetch from cache) the audio report for request."""
    generator = ReportGenerator(request, audio_dir=audio_dir, on_progress=on_progress, rng=rng)
    return generator.generate()
