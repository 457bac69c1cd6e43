# src/pipeline/content_pipeline.py — v2
"""Content pipeline: extracted text → category → title and description.

Every AI step goes through the fallback manager and is memoised in the
response cache. Failures degrade to documented fallback values; the only
caller-visible errors are an empty submission and an image nothing could
read.

Stages of a file submission:
    RECEIVED → EXTRACTING → CATEGORIZING → FORMATTING → COMPLETE
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from classboard.cache.base_cache_store import BaseResponseCache
from classboard.cache.fingerprint import compute_cache_key
from classboard.config.settings import Settings
from classboard.core.models import (
    CategoryResult,
    FileExtraction,
    FormattedContent,
    InputType,
    ProcessedContent,
    ProcessedInput,
)
from classboard.llm.models import ImageInput
from classboard.llm.retry import Sleep, incremental_delay
from classboard.logging.context import set_stage
from classboard.logging.logger import preview
from classboard.pipeline.parsing import (
    CategoryReply,
    ReplyParseError,
    TitleContentReply,
    TitleReply,
    parse_reply,
)
from classboard.pipeline.prompts import (
    FormatStyle,
    analyze_image_prompt,
    categorize_prompt,
    format_prompt,
)

if TYPE_CHECKING:
    from classboard.extraction.text_extraction import TextExtractionService
    from classboard.llm.manager import AIProviderManager

logger = logging.getLogger(__name__)

PREFERRED_FAMILY = "gemini"
TITLE_MAX_CHARS = 80
ECHO_PREFIX_CHARS = 50
EXCERPT_CHARS = 200
MIN_INPUT_CHARS = 5
UNTITLED = "Untitled"
EMPTY_INPUT_PLACEHOLDER = "New update with attached files"

_EMOJI_PATTERN = re.compile(
    "["
    "\u200d"
    "\u2600-\u27bf"
    "\ue000-\uf8ff"
    "\U0001f000-\U0001faff"
    "]+"
)
_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,", re.IGNORECASE)


class NoContentProvidedError(ValueError):
    """The submission carries no text and no extractable file content."""


class ImageAnalysisError(RuntimeError):
    """Neither a vision provider nor local OCR produced text for an image."""


def default_category() -> CategoryResult:
    """Classification used whenever the model reply is unusable."""
    return CategoryResult(
        category="general", confidence=0.5, is_urgent=False, due_date=None, tags=[]
    )


def truncate_title(title: str) -> str:
    title = title.strip()
    if len(title) > TITLE_MAX_CHARS:
        return title[: TITLE_MAX_CHARS - 3] + "..."
    return title


def heuristic_title(text: str) -> str:
    """First non-empty line, truncated to 80 characters."""
    for line in text.splitlines():
        if line.strip():
            return truncate_title(line)
    return UNTITLED


def clean_input_text(text: str) -> str:
    """Collapse whitespace and strip emoji from a single-input submission."""
    text = re.sub(r"\s+", " ", text)
    return _EMOJI_PATTERN.sub("", text).strip()


def _normalise(text: str) -> str:
    return " ".join(text.split())


def is_echo(output: str, source: str) -> bool:
    """Whether ``output`` just repeats ``source`` back.

    True when the two are equal or ``output`` contains the opening
    characters of ``source`` verbatim. Runs of whitespace compare equal;
    case does not, so a rewrite that only fixes capitalisation passes.
    """
    out = _normalise(output)
    src = _normalise(source)
    if not out or not src:
        return False
    return out == src or src[:ECHO_PREFIX_CHARS] in out


class ContentPipeline:
    """Categorize and format submissions through the AI provider manager."""

    def __init__(
        self,
        manager: AIProviderManager,
        cache: BaseResponseCache,
        settings: Settings | None = None,
        extraction: TextExtractionService | None = None,
        sleep: Sleep = asyncio.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._manager = manager
        self._cache = cache
        self._settings = settings or Settings()
        self._extraction = extraction
        self._sleep = sleep
        self._today = today

    # --- Categorize ---

    async def categorize(self, text: str) -> CategoryResult:
        """Classify ``text``; never raises, degrades to the default category."""
        key = compute_cache_key("categorize", text)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for categorize")
            return cached

        result = await self._manager.generate_with_fallback(
            categorize_prompt(text, self._today()), preferred_family=PREFERRED_FAMILY
        )
        if not result.success:
            logger.warning(
                "Categorization failed, using default category: %s", result.error,
                extra={"data": {"error_kind": result.error_kind, "input": preview(text)}},
            )
            return default_category()

        try:
            reply = parse_reply(result.text, CategoryReply)
        except ReplyParseError as e:
            logger.warning(
                "Unusable categorization reply from %s: %s", result.provider, e,
                extra={"data": {"input": preview(text)}},
            )
            return default_category()

        category = CategoryResult(
            category=reply.category,
            confidence=reply.confidence,
            is_urgent=reply.is_urgent,
            due_date=reply.due_date,
            tags=reply.tags,
        )
        await self._cache.put(key, category)
        return category

    # --- Format ---

    def _format_style(self, category: CategoryResult) -> FormatStyle:
        if category.category == "general":
            return "general"
        if self._settings.format_description_policy == "structured":
            return "structured"
        return "title"

    async def format(self, text: str, category: CategoryResult) -> FormattedContent:
        """Produce a title (and description) for ``text``; never raises.

        Replies that fail validation or echo the input are retried with
        incremental backoff, then replaced by heuristic content.
        """
        policy = self._settings.format_description_policy
        key = compute_cache_key("format", text, category, policy)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for format")
            return cached

        style = self._format_style(category)
        prompt = format_prompt(text, category, style)
        schema = TitleReply if style == "title" else TitleContentReply
        max_attempts = self._settings.format_max_attempts

        for attempt in range(1, max_attempts + 1):
            result = await self._manager.generate_with_fallback(
                prompt, preferred_family=PREFERRED_FAMILY
            )
            if not result.success:
                reason = result.error
                if result.error_kind == "no_providers":
                    break
            else:
                try:
                    reply = parse_reply(result.text, schema)
                except ReplyParseError as e:
                    reason = str(e)
                else:
                    description = getattr(reply, "content", "")
                    if self._echoes(reply.title, description, text):
                        reason = "reply echoes the input"
                    else:
                        formatted = FormattedContent(
                            title=truncate_title(reply.title),
                            content=description,
                            category=category,
                            generated_by="ai",
                        )
                        await self._cache.put(key, formatted)
                        return formatted

            logger.warning(
                "Format attempt %d/%d failed: %s", attempt, max_attempts, reason,
                extra={"data": {"input": preview(text)}},
            )
            if attempt < max_attempts:
                await self._sleep(incremental_delay(self._settings.format_backoff_s, attempt))

        logger.warning(
            "Formatting fell back to heuristic content",
            extra={"data": {"input": preview(text), "category": category.category}},
        )
        return self._heuristic_format(text, category, style)

    @staticmethod
    def _echoes(title: str, description: str, text: str) -> bool:
        if description and is_echo(description, text):
            return True
        # a title may legitimately repeat a short input
        return len(text.strip()) > TITLE_MAX_CHARS and is_echo(title, text)

    @staticmethod
    def _heuristic_format(
        text: str, category: CategoryResult, style: FormatStyle
    ) -> FormattedContent:
        if style == "general":
            description = text
        elif style == "structured":
            flat = " ".join(text.split())
            description = (
                flat if len(flat) <= EXCERPT_CHARS else flat[: EXCERPT_CHARS - 3] + "..."
            )
        else:
            description = ""
        return FormattedContent(
            title=heuristic_title(text),
            content=description,
            category=category,
            generated_by="heuristic",
        )

    # --- Images ---

    async def analyze_image(
        self, image: bytes | str, media_type: str = "image/jpeg"
    ) -> str:
        """Transcribe the text in an image.

        Args:
            image: Raw bytes, base64 text, or a base64 data URL.
            media_type: MIME type when ``image`` does not carry one.

        Raises:
            ImageAnalysisError: If the image cannot be decoded, or neither a
                vision provider nor local OCR returns any text.
        """
        data, media_type = _decode_image(image, media_type)
        key = compute_cache_key("analyzeImage", data)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        result = await self._manager.generate_vision_with_fallback(
            analyze_image_prompt(), ImageInput(data=data, media_type=media_type)
        )
        if result.success and result.text.strip():
            await self._cache.put(key, result.text)
            return result.text

        logger.warning(
            "Vision analysis unavailable (%s), trying local OCR", result.error_kind
        )
        if self._extraction is not None:
            try:
                ocr = await self._extraction.ocr_image(data)
            except Exception as e:
                logger.warning("Local OCR failed: %s", e)
            else:
                if ocr.content.strip():
                    return ocr.content

        raise ImageAnalysisError("Failed to analyze image content")

    # --- Submissions ---

    async def process_with_files(
        self, context_text: str, files: list[FileExtraction]
    ) -> ProcessedContent:
        """Categorize and format a context text plus its extracted files.

        Raises:
            NoContentProvidedError: If the combined text is empty.
        """
        combined = context_text or ""
        for file in files:
            combined += f"\n--- {file.file_name} ---\n{file.extracted.content}\n"
        combined = combined.strip()
        if not combined:
            raise NoContentProvidedError("No content provided")

        set_stage("categorizing")
        category = await self.categorize(combined)
        set_stage("formatting")
        formatted = await self.format(combined, category)
        set_stage("complete")

        logger.info(
            "Processed submission with %d file(s): %s",
            len(files), formatted.title,
            extra={"data": {"category": category.category, "generated_by": formatted.generated_by}},
        )
        return ProcessedContent(
            raw_text=combined,
            title=formatted.title,
            description=formatted.content,
            category=category,
            files=files,
            generated_by=formatted.generated_by,
        )

    async def process_files(
        self, context_text: str, paths: list[str | Path]
    ) -> ProcessedContent:
        """Full submission path: extract every file, then categorize and format.

        Raises:
            NoContentProvidedError: If there is neither text nor a file.
        """
        set_stage("received")
        if not (context_text or "").strip() and not paths:
            raise NoContentProvidedError("No content provided")

        set_stage("extracting")
        files = await self._require_extraction().extract_from_multiple_files(paths)
        return await self.process_with_files(context_text, files)

    async def process_input(
        self, value: str | bytes, input_type: InputType = "text"
    ) -> ProcessedInput:
        """Single-input path: one text, image, PDF or DOCX.

        Extraction failures fall back to an empty text; inputs shorter than
        five characters are replaced by a placeholder so the AI steps always
        have something to work with.
        """
        set_stage("extracting")
        try:
            text = await self._extract_single(value, input_type)
        except Exception as e:
            logger.warning("Error processing %s input: %s", input_type, e)
            text = value if isinstance(value, str) and input_type == "text" else ""

        text = clean_input_text(text)
        if len(text) < MIN_INPUT_CHARS:
            text = EMPTY_INPUT_PLACEHOLDER

        set_stage("categorizing")
        category = await self.categorize(text)
        set_stage("formatting")
        formatted = await self.format(text, category)
        set_stage("complete")

        return ProcessedInput(
            input_type=input_type,
            extracted_text=text,
            title=formatted.title,
            content=formatted.content,
            category=category,
            generated_by=formatted.generated_by,
        )

    async def _extract_single(self, value: str | bytes, input_type: InputType) -> str:
        if input_type == "text":
            return value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value

        extraction = self._require_extraction()
        if input_type == "image":
            if isinstance(value, str) and _is_local_file(value):
                return (await extraction.extract_text(value)).content
            data, _ = _decode_image(value, "image/jpeg")
            return (await extraction.ocr_image(data)).content

        extension = f".{input_type}"
        if isinstance(value, bytes):
            return (await extraction.extract_bytes(value, extension)).content
        return (await extraction.extract_text(value)).content

    def _require_extraction(self) -> TextExtractionService:
        if self._extraction is None:
            from classboard.extraction.text_extraction import TextExtractionService

            self._extraction = TextExtractionService()
        return self._extraction


def _is_local_file(value: str) -> bool:
    """Whether a string image input names a file rather than carrying base64."""
    if _DATA_URL_PATTERN.match(value.strip()):
        return False
    try:
        return Path(value).is_file()
    except (OSError, ValueError):
        # base64 payloads overflow the OS name limit
        return False


def _decode_image(image: bytes | str, media_type: str) -> tuple[bytes, str]:
    """Normalise bytes / base64 / data-URL input to raw bytes and a MIME type."""
    if isinstance(image, bytes):
        return image, media_type
    payload = image.strip()
    match = _DATA_URL_PATTERN.match(payload)
    if match:
        media_type = match.group("mime")
        payload = payload[match.end():]
    try:
        return base64.b64decode(payload, validate=True), media_type
    except (binascii.Error, ValueError) as e:
        raise ImageAnalysisError("Image is not valid base64") from e
