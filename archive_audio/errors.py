"""Exceptions raised by the generation pipeline."""


class GenerationError(Exception):
    """Base class for failures that abort a generation run."""


class InvalidRequestError(GenerationError, ValueError):
    """The request cannot be generated (e.g. no documents or articles)."""


class MissingCredentialError(GenerationError):
    """A required API key is not configured."""

    def __init__(self, env_var: str):
        super().__init__(f"{env_var} is not configured")
        self.env_var = env_var


class UpstreamError(GenerationError):
    """The text-generation or speech-synthesis service returned an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyAudioError(UpstreamError):
    """The speech service answered successfully but with no audio."""


class ConcatenationError(GenerationError):
    """Per-turn audio could not be merged into the final file."""
