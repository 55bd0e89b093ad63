"""Podcast: two hosts discuss a set of articles."""

from typing import Iterator

from archive_audio.constants import DEFAULT_HOSTS, PODCAST_TARGET_RATIO
from archive_audio.dialogue import DialogueGenerator, ProgressCallback
from archive_audio.documents import create_content_summary
from archive_audio.errors import InvalidRequestError
from archive_audio.models import GenerationResult, Persona, PodcastRequest
from archive_audio.text_generator import generate_host_comment


class PodcastGenerator(DialogueGenerator):
    kind = "podcast"
    default_speakers = DEFAULT_HOSTS
    target_ratio = PODCAST_TARGET_RATIO
    complete_message = "Podcast complete"

    def __init__(self, request: PodcastRequest, **kwargs):
        super().__init__(request.selected_hosts, request.target_length_seconds, **kwargs)
        self.articles = request.articles

    def validate(self) -> None:
        if not self.articles:
            raise InvalidRequestError("No articles provided")

    def content_id_parts(self) -> list[str]:
        article_ids = ",".join(a.url or a.title or a.id for a in self.articles)
        return [article_ids, f"{self.speaker1.key},{self.speaker2.key}"]

    def overview(self) -> str:
        return create_content_summary(self.articles)

    def comment(self, persona: Persona, content: str, previous_comment=None, is_intro=False,
                is_outro=False, opening_line=None, closing_line=None) -> str:
        return generate_host_comment(
            persona,
            content,
            self.dialogue,
            previous_comment=previous_comment,
            is_intro=is_intro,
            is_outro=is_outro,
            opening_line=opening_line,
            closing_line=closing_line,
        )

    def focus_turns(self) -> Iterator[tuple[str, str]]:
        """A randomly chosen article per turn, forever."""
        while True:
            article = self.rng.choice(self.articles)
            yield article.title or article.id, create_content_summary([article])

    def preparing_message(self) -> str:
        return f"{self.speaker1.name} and {self.speaker2.name} are preparing the podcast"

    def opening_message(self) -> str:
        return f"{self.speaker1.name} is opening the show"

    def response_message(self) -> str:
        return f"{self.speaker2.name} is joining the conversation"

    def settings(self) -> dict:
        return {
            "target_length_seconds": self.target_length_seconds,
            "articles": len(self.articles),
        }


def generate_podcast(
    request: PodcastRequest,
    on_progress: ProgressCallback | None = None,
    audio_dir: str | None = None,
    rng=None,
) -> GenerationResult:
    """Generate (or fetch from cache) the podcast episode for request."""
    generator = PodcastGenerator(request, audio_dir=audio_dir, on_progress=on_progress, rng=rng)
    return generator.generate()
