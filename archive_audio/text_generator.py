"""Text generation via the xAI (Grok) chat-completions API."""

import logging
import os
import re

import httpx

from archive_audio.constants import (
    XAI_API_URL,
    XAI_MODEL,
    XAI_MAX_TOKENS,
    XAI_TEMPERATURE,
    TRANSCRIPT_MAX_CHARS,
    ENV_XAI_API_KEY,
)
from archive_audio.errors import MissingCredentialError, UpstreamError
from archive_audio.models import DialogueTurn, Persona
from archive_audio.config import http_timeout

logger = logging.getLogger(__name__)

_ACTION_RE = re.compile(r"\*[^*]+\*")
_CUE_RE = re.compile(r"\[[^\]]+\]")
_ASIDE_RE = re.compile(r"\([^)]+\)")

INVESTIGATOR_GUIDELINES = """Guidelines:
- Be concise and impactful
- Never include stage directions or audio cues like [laughs] or [pauses]
- Reference specific details from the documents (names, dates, places, events)
- Do NOT mention document IDs or filenames - they are just alphanumeric codes (like "EFTA01249790") that sound awkward when spoken
- Build on the conversation naturally
- Keep responses to 2-4 sentences unless introducing complex information

Handling "False Redactions" / Hidden Text:
Documents may include data about "falseRedactions" with "hiddenWords" and "hiddenPhrases" - text that was hidden behind black redaction boxes but recovered by the analyzer.
- IMPORTANT: If these words/phrases are garbled, nonsensical, or not clearly readable (e.g., random characters, partial words, OCR artifacts), they are likely MISTAKES by the analyzer, NOT actual redacted text. IGNORE them completely.
- However, if you see CLEAR names, dates, locations, or coherent phrases in the hidden text, these MAY be genuinely significant - text that was intentionally redacted from the document. You can mention these as potentially interesting findings worth noting.
- Use your judgment: only highlight hidden text that appears meaningful and could be relevant to the investigation."""

HOST_GUIDELINES = """Guidelines:
- Be engaging and conversational
- Never include stage directions or audio cues
- Reference specific details from the content
- Keep responses natural and flowing
- Aim for 2-4 sentences per turn"""


def generate_text(
    user_prompt: str,
    system_prompt: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> str:
    """Send one chat-completion request and return the assistant text.

    Raises MissingCredentialError before any network I/O when XAI_API_KEY
    is unset, and UpstreamError on a non-2xx status or a reply without
    choices[0].message.content. No retry.
    """
    api_key = os.environ.get(ENV_XAI_API_KEY)
    if not api_key:
        raise MissingCredentialError(ENV_XAI_API_KEY)

    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_prompt})

    payload = {
        "model": XAI_MODEL,
        "messages": messages,
        "temperature": XAI_TEMPERATURE if temperature is None else temperature,
        "max_tokens": XAI_MAX_TOKENS if max_tokens is None else max_tokens,
        "stream": False,
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    logger.debug("Requesting completion (%d prompt chars)", len(user_prompt))
    try:
        response = httpx.post(XAI_API_URL, json=payload, headers=headers, timeout=http_timeout())
    except httpx.HTTPError as e:
        raise UpstreamError(f"Grok API request failed: {e}") from e

    if not response.is_success:
        raise UpstreamError(
            f"Grok API error: {response.status_code} - {response.text}",
            status_code=response.status_code,
        )

    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise UpstreamError("Invalid response from Grok API") from e
    if not content:
        raise UpstreamError("Invalid response from Grok API")
    return content


def clean_comment(text: str, strip_asides: bool = False) -> str:
    """Remove *actions*, [cues] and optionally (asides) from generated speech."""
    text = _ACTION_RE.sub("", text)
    text = _CUE_RE.sub("", text)
    if strip_asides:
        text = _ASIDE_RE.sub("", text)
    return text.strip()


def _dialogue_context(dialogue: list[DialogueTurn]) -> str:
    if not dialogue:
        return ""
    lines = "\n\n".join(f"{turn.speaker}: {turn.text}" for turn in dialogue)
    return f"Previous dialogue:\n{lines}"


def _transcript(dialogue: list[DialogueTurn]) -> str:
    return "\n".join(f"{turn.speaker}: {turn.text}" for turn in dialogue)


def generate_investigator_comment(
    persona: Persona,
    document_content: str,
    dialogue: list[DialogueTurn],
    investigation: str,
    previous_comment: str | None = None,
    is_intro: bool = False,
    is_outro: bool = False,
    opening_line: str | None = None,
    closing_line: str | None = None,
) -> str:
    """One investigative-report turn spoken by persona."""
    context = _dialogue_context(dialogue)

    system_prompt = (
        f'You are {persona.name}, also known as "{persona.alias}". '
        f'You are an investigator analyzing documents for "{investigation}".\n\n'
        f"Your tone is {persona.tone} and your humor style is {persona.humor_style}.\n\n"
        f"{INVESTIGATOR_GUIDELINES}"
    )
    if is_intro and opening_line:
        system_prompt += f'\n\nStart your response with a variation of: "{opening_line}"'
    if is_outro and closing_line:
        system_prompt += f'\n\nEnd your response with a variation of: "{closing_line}"'

    if is_intro:
        user_prompt = (
            f"You're opening the investigation. Here's an overview of the documents:\n\n"
            f"{document_content}\n\n{context}\n\n"
            f"Provide an engaging introduction that sets the stage for the investigation."
        )
    elif is_outro:
        user_prompt = (
            f"The investigation is wrapping up. Here's what we've covered:\n\n"
            f"{document_content}\n\n{context}\n\n"
            f"Provide a compelling conclusion that summarizes key findings and leaves the audience wanting more."
        )
    elif previous_comment:
        user_prompt = (
            f'Respond to your colleague\'s observation:\n\n"{previous_comment}"\n\n'
            f"Relevant document content:\n{document_content}\n\n{context}\n\n"
            f"Provide your analysis or follow-up observation."
        )
    else:
        user_prompt = (
            f"Analyze this document content:\n\n{document_content}\n\n{context}\n\n"
            f"Provide your observations and analysis."
        )

    response = generate_text(user_prompt, system_prompt=system_prompt, temperature=0.8, max_tokens=500)
    return clean_comment(response, strip_asides=True)


def generate_host_comment(
    persona: Persona,
    article_content: str,
    dialogue: list[DialogueTurn],
    previous_comment: str | None = None,
    is_intro: bool = False,
    is_outro: bool = False,
    opening_line: str | None = None,
    closing_line: str | None = None,
) -> str:
    """One podcast turn spoken by persona."""
    context = _dialogue_context(dialogue)

    system_prompt = (
        f'You are {persona.name}, also known as "{persona.alias}". '
        f"You are a podcast host discussing interesting content.\n\n"
        f"Your tone is {persona.tone} and your humor style is {persona.humor_style}.\n\n"
        f"{HOST_GUIDELINES}"
    )
    if is_intro and opening_line:
        system_prompt += f'\n\nStart with a variation of: "{opening_line}"'
    if is_outro and closing_line:
        system_prompt += f'\n\nEnd with a variation of: "{closing_line}"'

    if is_intro:
        user_prompt = (
            f"Open the podcast episode. Here's what we're discussing:\n\n"
            f"{article_content}\n\nProvide an engaging introduction."
        )
    elif is_outro:
        user_prompt = f"Wrap up the episode:\n\n{context}\n\nProvide a memorable conclusion."
    elif previous_comment:
        user_prompt = f'Respond to: "{previous_comment}"\n\nContent: {article_content}\n\n{context}'
    else:
        user_prompt = f"Discuss this content:\n\n{article_content}\n\n{context}"

    response = generate_text(user_prompt, system_prompt=system_prompt, temperature=0.8, max_tokens=400)
    return clean_comment(response)


def generate_title(dialogue: list[DialogueTurn], host_names: list[str]) -> str:
    """Short episode title derived from the transcript."""
    system_prompt = (
        f"You are creating a title for an audio episode. The hosts are {' and '.join(host_names)}.\n"
        f"Create a catchy, concise title that captures the essence of the discussion. "
        f"Keep it under 10 words.\nReturn ONLY the title, nothing else."
    )
    transcript = _transcript(dialogue)[:TRANSCRIPT_MAX_CHARS]
    response = generate_text(
        f"Create a title for this discussion:\n\n{transcript}",
        system_prompt=system_prompt,
        temperature=0.9,
        max_tokens=50,
    )
    return re.sub(r"[\"']", "", response).strip()


def generate_tags(dialogue: list[DialogueTurn]) -> list[str]:
    """5-8 tags derived from the transcript."""
    system_prompt = (
        "Generate 5-8 relevant tags for this audio content.\n"
        "Return ONLY a comma-separated list of tags, nothing else."
    )
    transcript = _transcript(dialogue)[:TRANSCRIPT_MAX_CHARS]
    response = generate_text(
        f"Generate tags for:\n\n{transcript}",
        system_prompt=system_prompt,
        temperature=0.7,
        max_tokens=100,
    )
    return [tag.strip() for tag in response.split(",") if tag.strip()]
