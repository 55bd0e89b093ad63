"""Two-speaker dialogue pipeline shared by reports and podcasts.

A run moves through these stages, strictly in order:

    preparing -> opening -> responding -> content-loop -> closing
              -> concatenating -> titling -> complete

Any exception moves it to ``error``. Every turn is generated from the
previous one, so turns are produced and synthesized one at a time. The
final file is cached under a content-addressed id: a second run with the
same inputs returns the existing file without calling either API.
"""

import logging
import os
import random
from abc import ABC, abstractmethod
from typing import Callable, Iterator

from archive_audio import artifacts
from archive_audio.assembly import concatenate_audio_files
from archive_audio.constants import MAX_DIALOGUE_TURNS
from archive_audio.exporter import export_manifest, load_manifest
from archive_audio.models import (
    DialogueTurn,
    GenerationProgress,
    GenerationResult,
    Persona,
)
from archive_audio.personas import pick_line, select_personas
from archive_audio.text_generator import generate_tags, generate_title
from archive_audio.tts import estimate_duration, synthesize_turn

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GenerationProgress], None]


class Stage:
    PREPARING = "preparing"
    OPENING = "opening"
    RESPONDING = "responding"
    CONTENT_LOOP = "content-loop"
    CLOSING = "closing"
    CONCATENATING = "concatenating"
    TITLING = "titling"
    COMPLETE = "complete"
    ERROR = "error"


class DialogueGenerator(ABC):
    """Base pipeline. Subclasses supply prompts, focus rotation and wording."""

    kind = "dialogue"
    default_speakers: tuple[str, str] = ("host1", "host2")
    target_ratio = 0.8
    complete_message = "Generation complete"

    def __init__(
        self,
        speaker_keys: list[str] | None,
        target_length_seconds: int,
        audio_dir: str | None = None,
        on_progress: ProgressCallback | None = None,
        rng: random.Random | None = None,
    ):
        self.speaker1, self.speaker2 = select_personas(speaker_keys, self.default_speakers)
        self.target_length_seconds = target_length_seconds
        self.audio_dir = audio_dir
        self.on_progress = on_progress
        self.rng = rng or random.Random()

        self.stage = Stage.PREPARING
        self.dialogue: list[DialogueTurn] = []
        self.audio_files: list[str] = []
        self.estimated_duration = 0

    # --- hooks ---

    @abstractmethod
    def validate(self) -> None:
        """Raise InvalidRequestError if the request can't be generated."""

    @abstractmethod
    def content_id_parts(self) -> list[str]:
        ...

    @abstractmethod
    def overview(self) -> str:
        """Prompt content covering all inputs."""

    @abstractmethod
    def comment(
        self,
        persona: Persona,
        content: str,
        previous_comment: str | None = None,
        is_intro: bool = False,
        is_outro: bool = False,
        opening_line: str | None = None,
        closing_line: str | None = None,
    ) -> str:
        ...

    @abstractmethod
    def focus_turns(self) -> Iterator[tuple[str, str]]:
        """Yield (label, prompt content) for each content-loop turn."""

    def content_progress(self, speaker: Persona, label: str, step: int) -> GenerationProgress:
        return GenerationProgress("generating", f"{speaker.name} is speaking...", current_step=step)

    def preparing_message(self) -> str:
        return f"{self.speaker1.name} and {self.speaker2.name} are preparing"

    def opening_message(self) -> str:
        return f"{self.speaker1.name} is opening"

    def response_message(self) -> str:
        return f"{self.speaker2.name} is responding"

    def closing_message(self) -> str:
        return f"{self.speaker1.name} is wrapping up"

    def settings(self) -> dict:
        return {"target_length_seconds": self.target_length_seconds}

    # --- pipeline ---

    @property
    def content_budget(self) -> float:
        """Estimated seconds the content loop may fill before closing."""
        return self.target_length_seconds * self.target_ratio

    def _progress(self, progress: GenerationProgress) -> None:
        logger.debug("[%s] %s: %s", self.stage, progress.status, progress.message)
        if self.on_progress:
            self.on_progress(progress)

    def _add_turn(self, persona: Persona, text: str, temp_dir: str) -> DialogueTurn:
        turn_index = len(self.dialogue)
        audio_file = synthesize_turn(text, persona, temp_dir, turn_index)
        turn = DialogueTurn(speaker=persona.key, text=text, audio_file=audio_file)
        self.dialogue.append(turn)
        self.audio_files.append(audio_file)
        self.estimated_duration += estimate_duration(text)
        logger.info(
            "Turn %d (%s): %d words, ~%ds total",
            turn_index, persona.key, len(text.split()), self.estimated_duration,
        )
        return turn

    def generate(self) -> GenerationResult:
        """Run the whole pipeline and return its result.

        Raises InvalidRequestError before any I/O if the request is empty.
        Every other failure is returned as GenerationResult(success=False).
        """
        self.validate()

        audio_dir = artifacts.resolve_audio_dir(self.audio_dir)
        run_id = artifacts.content_id(self.content_id_parts())
        final_path = artifacts.final_audio_path(run_id, audio_dir)

        if os.path.exists(final_path):
            logger.info("Using cached %s for %s", final_path, self.kind)
            manifest = load_manifest(run_id, audio_dir)
            self.stage = Stage.COMPLETE
            return GenerationResult(
                success=True,
                audio_file=artifacts.audio_filename(run_id),
                audio_url=artifacts.audio_url(run_id),
                title=manifest.get("title"),
                tags=list(manifest.get("tags") or []),
            )

        temp_dir = artifacts.init_temp_dir(run_id, audio_dir)
        logger.info("Generating %s %s (target %ds) in %s", self.kind, run_id, self.target_length_seconds, temp_dir)
        try:
            result = self._run(run_id, audio_dir, temp_dir, final_path)
        except Exception as e:
            self.stage = Stage.ERROR
            logger.exception("Error generating %s %s", self.kind, run_id)
            result = GenerationResult(success=False, error=str(e) or type(e).__name__)
        finally:
            artifacts.cleanup_temp_dir(temp_dir)

        if result.success:
            self.stage = Stage.COMPLETE
            self._progress(GenerationProgress(Stage.COMPLETE, self.complete_message))
        return result

    def _run(self, run_id: str, audio_dir: str, temp_dir: str, final_path: str) -> GenerationResult:
        speaker1, speaker2 = self.speaker1, self.speaker2
        overview = self.overview()

        self.stage = Stage.PREPARING
        self._progress(GenerationProgress("preparing", self.preparing_message()))

        self.stage = Stage.OPENING
        self._progress(GenerationProgress("generating", self.opening_message(), current_step=1))
        opening = self.comment(
            speaker1, overview, is_intro=True,
            opening_line=pick_line(speaker1.opening_lines, self.rng),
        )
        self._add_turn(speaker1, opening, temp_dir)

        self.stage = Stage.RESPONDING
        self._progress(GenerationProgress("generating", self.response_message(), current_step=2))
        response = self.comment(speaker2, overview, previous_comment=opening)
        self._add_turn(speaker2, response, temp_dir)

        self.stage = Stage.CONTENT_LOOP
        speakers = (speaker1, speaker2)
        speaker_index = 0
        for label, content in self.focus_turns():
            if self.estimated_duration >= self.content_budget:
                break
            if len(self.dialogue) >= MAX_DIALOGUE_TURNS:
                logger.info("Reached %d turns, stopping content loop", MAX_DIALOGUE_TURNS)
                break
            speaker = speakers[speaker_index % 2]
            self._progress(self.content_progress(speaker, label, len(self.dialogue) + 1))
            text = self.comment(speaker, content, previous_comment=self.dialogue[-1].text)
            self._add_turn(speaker, text, temp_dir)
            speaker_index += 1

        self.stage = Stage.CLOSING
        self._progress(GenerationProgress("concluding", self.closing_message()))
        closing = self.comment(
            speaker1, overview, previous_comment=self.dialogue[-1].text, is_outro=True,
            closing_line=pick_line(speaker1.closing_lines, self.rng),
        )
        self._add_turn(speaker1, closing, temp_dir)

        self.stage = Stage.CONCATENATING
        self._progress(GenerationProgress("finalizing", "Combining audio segments"))
        staged_path = os.path.join(temp_dir, artifacts.audio_filename(run_id))
        concatenate_audio_files(self.audio_files, staged_path)

        self.stage = Stage.TITLING
        title = generate_title(self.dialogue, [speaker1.name, speaker2.name])
        tags = generate_tags(self.dialogue)

        export_manifest(
            run_id,
            audio_dir,
            kind=self.kind,
            title=title,
            tags=tags,
            speakers={speaker1.key: speaker1.name, speaker2.key: speaker2.name},
            dialogue=self.dialogue,
            estimated_seconds=self.estimated_duration,
            settings=self.settings(),
            audio_path=staged_path,
        )
        # Same directory tree, so the rename is atomic and readers only ever
        # see a complete file.
        os.replace(staged_path, final_path)
        logger.info("Saved %s", final_path)

        return GenerationResult(
            success=True,
            audio_file=artifacts.audio_filename(run_id),
            audio_url=artifacts.audio_url(run_id),
            title=title,
            tags=tags,
        )
