"""DSPy-powered helpers for titling and describing images."""

from __future__ import annotations

import base64
import io
import logging
import os
from enum import Enum
from typing import Optional, Protocol

try:  # pragma: no cover - optional dependency
    import dspy  # type: ignore
except ImportError:  # pragma: no cover - executed when DSPy absent
    dspy = None  # type: ignore[assignment]

from PIL import Image

from imagedrop.config.models import LLMSettings

LOGGER = logging.getLogger(__name__)


class DescriptionKind(str, Enum):
    """What kind of text to request for an image."""

    TITLE = "short title"
    DESCRIPTION = "brief description"


_INSTRUCTIONS = {
    DescriptionKind.TITLE: (
        "Provide a short, descriptive title for this image (5-10 words max). "
        "Only return the title, nothing else."
    ),
    DescriptionKind.DESCRIPTION: "Provide a brief description of this image (2-3 sentences).",
}


class ImageDescriber(Protocol):
    """Black-box service returning text about an image."""

    def describe(self, image: bytes, kind: DescriptionKind) -> str:
        """Return a title or description for PNG ``image`` bytes."""
        ...


class VisionDescriber:
    """Generate image titles and descriptions using a DSPy program."""

    def __init__(self, settings: LLMSettings) -> None:
        """Configure DSPy for the vision-capable model in ``settings``.

        Args:
            settings: LLM configuration with provider, model and credentials.

        Raises:
            RuntimeError: If DSPy is unavailable or the language model cannot be configured.
        """

        if dspy is None:
            raise RuntimeError(
                "Image descriptions require DSPy. Install it or set llm.enabled to false."
            )

        self._settings = settings
        self._language_model = self._configure_language_model()
        self._program = self._build_program()

    def describe(self, image: bytes, kind: DescriptionKind) -> str:
        """Return the requested text for ``image``.

        Raises:
            RuntimeError: If the model call fails or returns nothing.
        """

        limit = (
            self._settings.title_max_tokens
            if kind is DescriptionKind.TITLE
            else self._settings.description_max_tokens
        )
        try:
            response = self._program(
                image=self._load_image(image),
                instruction=_INSTRUCTIONS[kind],
                config={"max_tokens": limit},
            )
        except Exception as exc:  # pragma: no cover - DSPy runtime errors
            LOGGER.debug("Vision describer failed: %s", exc)
            raise RuntimeError(f"Image {kind.value} request failed: {exc}") from exc

        text = getattr(response, "text", "") if response else ""
        text = text.strip() if isinstance(text, str) else ""
        if not text:
            raise RuntimeError(f"Image {kind.value} request returned no text.")
        return text

    def _configure_language_model(self):
        """Build the DSPy language model and make it the default."""

        lm_kwargs: dict[str, object] = {
            "model": f"{self._settings.provider}/{self._settings.model}"
            if self._settings.provider and "/" not in self._settings.model
            else self._settings.model,
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.description_max_tokens,
        }
        if self._settings.api_base_url:
            lm_kwargs["api_base"] = self._settings.api_base_url
        api_key = resolve_api_key(self._settings)
        if api_key:
            lm_kwargs["api_key"] = api_key

        try:
            language_model = dspy.LM(**lm_kwargs)
            dspy.settings.configure(lm=language_model)
        except Exception as exc:  # pragma: no cover - DSPy configuration errors
            raise RuntimeError(
                "Unable to configure the DSPy language model for image descriptions. "
                "Verify your llm settings."
            ) from exc
        return language_model

    @staticmethod
    def _build_program():
        """Construct the DSPy program used for image text requests."""

        class ImageTextSignature(dspy.Signature):  # type: ignore[misc]
            """Answer the instruction about the image with plain text only."""

            image: "dspy.Image" = dspy.InputField()
            instruction: str = dspy.InputField()
            text: str = dspy.OutputField()

        return dspy.Predict(ImageTextSignature)

    @staticmethod
    def _load_image(data: bytes):
        """Return a DSPy image payload for PNG bytes."""

        if hasattr(dspy.Image, "from_PIL"):
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return dspy.Image.from_PIL(image.copy())
        encoded = base64.b64encode(data).decode("ascii")
        return dspy.Image(url=f"data:image/png;base64,{encoded}")


def resolve_api_key(settings: LLMSettings) -> Optional[str]:
    """Return the configured API key, falling back to ``OPENAI_API_KEY``."""
    if settings.api_key:
        return settings.api_key
    if settings.provider == "openai":
        return os.environ.get("OPENAI_API_KEY") or None
    return None


def build_describer(settings: LLMSettings) -> Optional[ImageDescriber]:
    """Return a describer when descriptions are enabled and usable, else ``None``."""
    if not settings.enabled:
        return None
    if resolve_api_key(settings) is None and settings.api_base_url is None:
        LOGGER.warning("llm.enabled is set but no API key is configured; AI naming disabled.")
        return None
    try:
        return VisionDescriber(settings)
    except RuntimeError as exc:
        LOGGER.warning("AI naming disabled: %s", exc)
        return None


__all__ = [
    "DescriptionKind",
    "ImageDescriber",
    "VisionDescriber",
    "resolve_api_key",
    "build_describer",
]
