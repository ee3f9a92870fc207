"""
Prompt Builder Layer
====================

Assembles the upstream PromptRequest for a farmer's question.

Responsibilities:
- Defines the authoritative advisor persona shared by both templates
- Selects the image-analysis template when an image is attached, the
  text-only advisory template otherwise
- Attaches the fixed generation parameters

Invariants:
- The question is trimmed before it is framed
- A blank question is rejected here, before any upstream call is possible
- Image parts are always declared as image/jpeg
"""

from typing import Optional

from inference import GenerationConfig, ImagePart, PromptRequest

# ── Behavioral Contract ───────────────────────────────────────────────────────
ADVISOR_PERSONA = "You are an expert agricultural advisor"

TEXT_TEMPLATE = (
    ADVISOR_PERSONA + " helping farmers. Answer the following question concisely "
    "and practically. Focus on actionable advice suitable for farmers. "
    "Question: {question}"
)

IMAGE_TEMPLATE = (
    ADVISOR_PERSONA + ". Analyze this crop/farm image and answer: {question}"
)

IMAGE_MIME_TYPE = "image/jpeg"

GENERATION_CONFIG = GenerationConfig(
    temperature=0.7,
    top_k=40,
    top_p=0.95,
    max_output_tokens=1024,
)


def build_prompt_request(question: str, image_base64: Optional[str] = None) -> PromptRequest:
    """
    Frame a question for the upstream model.

    Args:
        question: The farmer's question (surrounding whitespace is dropped).
        image_base64: Optional base64 image; selects the image template.

    Returns:
        A fresh PromptRequest.

    Raises:
        ValueError: If the question is blank.
    """
    text = (question or "").strip()
    if not text:
        raise ValueError("Question is required")

    if image_base64:
        return PromptRequest(
            text=IMAGE_TEMPLATE.format(question=text),
            image=ImagePart(data=image_base64, mime_type=IMAGE_MIME_TYPE),
            generation=GENERATION_CONFIG,
        )

    return PromptRequest(
        text=TEXT_TEMPLATE.format(question=text),
        generation=GENERATION_CONFIG,
    )
