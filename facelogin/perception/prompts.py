"""Prompt texts sent to the perception model."""

from __future__ import annotations

PRESENCE_PROMPT = (
    "Is there exactly one clear human face in this image?\n"
    'Answer only "yes" or "no".\n'
    'If the face is unclear, the image is too dark, or more than one face is visible, answer "no".'
)

DESCRIPTION_SYSTEM_PROMPT = (
    "You are a facial recognition expert. Provide extremely detailed, objective descriptions "
    "of faces for identification purposes. Focus on permanent features and facial structure."
)

DESCRIPTION_PROMPT = (
    "Describe the face in this image with great precision. Cover:\n"
    "1. Face shape (oval, round, rectangular, square, triangular)\n"
    "2. Eyes (size, shape, colour if visible, spacing)\n"
    "3. Nose (size, shape, width)\n"
    "4. Mouth and lips (size, shape)\n"
    "5. Eyebrows (shape, density)\n"
    "6. Chin (shape, prominence)\n"
    "7. Other distinguishing features (moles, scars, glasses, beard, etc.)\n\n"
    "Give a precise, detailed description in a single paragraph."
)

COMPARISON_TEMPLATE = """You are a face recognition expert. You have two descriptions of faces.

**Description 1 (submitted image):**
{submitted}

**Description 2 (stored record):**
{stored}

Do these two descriptions belong to the same person?

Compare very carefully:
- face shape
- eyes (size, shape, colour, spacing)
- nose (size, shape, width)
- mouth and lips
- eyebrows
- chin
- distinguishing features

**Very important:**
- if the core features largely agree (> 70%), give a high number
- if there are clear differences in the core features, give a low number
- do not be lenient; a false match is worse than a missed one

Give only a number from 0 to 100 representing the similarity between them.
Answer with the number only, without any additional text."""


def build_comparison_prompt(submitted: str, stored: str) -> str:
    return COMPARISON_TEMPLATE.format(submitted=submitted, stored=stored)
