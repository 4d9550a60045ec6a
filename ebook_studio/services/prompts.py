"""Prompt templates for blueprint synthesis and chapter generation.

Pure functions: no I/O, same input always yields the same prompt pair.

The blueprint schema text below is the output contract the blueprint
validator enforces (see ``models/blueprint.py``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional, Sequence

from ebook_studio.models import (
    MAX_BLUEPRINT_CHAPTERS,
    BookType,
    InterviewResponse,
    SectionOutline,
    VoiceProfile,
)

DEFAULT_TONE = "professional yet approachable"
DEFAULT_VOCABULARY_LEVEL = "moderate"
DEFAULT_AUDIENCE = "general readers"


# ==============================================================================
# Blueprint Prompts
# ==============================================================================

BLUEPRINT_SCHEMA_EXAMPLE = {
    "title": "Compelling book title",
    "subtitle_options": ["Option 1", "Option 2", "Option 3"],
    "description": "2-3 paragraph book description for marketing",
    "target_audience": "Detailed description of ideal reader",
    "book_type": "|".join(book_type.value for book_type in BookType),
    "target_word_count": 50000,
    "tone": "Description of voice and tone",
    "chapters": [
        {
            "title": "Chapter Title",
            "summary": "2-3 sentence summary of chapter content",
            "target_word_count": 5000,
            "sections": [
                {
                    "title": "Section Title",
                    "summary": "Brief section description",
                    "target_word_count": 1500,
                }
            ],
        }
    ],
    "research_needs": ["Topic 1 requiring research", "Topic 2"],
    "media_requirements": ["Type of images needed", "Charts/diagrams needed"],
    "estimated_credits": 500,
}

BLUEPRINT_SYSTEM_PROMPT = f"""You are an expert book strategist and publishing consultant.
Your job is to analyze interview responses from an aspiring author and create a comprehensive book blueprint.

You must respond with valid JSON only, no markdown or explanations. The JSON must match this exact structure:
{json.dumps(BLUEPRINT_SCHEMA_EXAMPLE, indent=2)}

Rules:
- book_type must be exactly one of: {", ".join(book_type.value for book_type in BookType)}
- Every target_word_count must be a positive integer
- subtitle_options must contain at least one subtitle
- estimated_credits must be a non-negative integer
- Never more than {MAX_BLUEPRINT_CHAPTERS} chapters

Create a professional, well-structured blueprint that will result in a high-quality, publishable book.
Include 8-15 chapters depending on the target length. Each chapter should have 2-4 sections."""


def format_interview_responses(responses: Sequence[InterviewResponse]) -> str:
    """Render responses as bold question / answer pairs separated by blank lines."""
    return "\n\n".join(f"**{r.question}**\n{r.answer}" for r in responses)


def build_blueprint_prompt(responses: Sequence[InterviewResponse]) -> tuple[str, str]:
    """Build (system_instructions, user_message) for blueprint synthesis."""
    user_message = (
        "Based on these interview responses, create a comprehensive book blueprint:\n\n"
        f"{format_interview_responses(responses)}"
    )
    return BLUEPRINT_SYSTEM_PROMPT, user_message


# ==============================================================================
# Chapter Generation Prompts
# ==============================================================================


@dataclass(frozen=True)
class BookContext:
    """The parts of a book that shape a chapter prompt."""

    title: str
    book_type: str
    target_audience: str = ""
    voice_profile: Optional[VoiceProfile] = None


@dataclass(frozen=True)
class ResolvedVoice:
    tone: str
    vocabulary_level: str
    style: tuple[str, ...] = ()


def resolve_voice(
    override: Optional[VoiceProfile],
    stored: Optional[VoiceProfile],
) -> ResolvedVoice:
    """Merge a per-call voice profile over the book's stored one.

    Each field falls back independently: override, then stored, then default.
    """
    tone = (override and override.tone) or (stored and stored.tone) or DEFAULT_TONE
    vocabulary_level = (
        (override and override.vocabulary_level)
        or (stored and stored.vocabulary_level)
        or DEFAULT_VOCABULARY_LEVEL
    )
    style = (override and override.style) or (stored and stored.style) or []
    return ResolvedVoice(tone=tone, vocabulary_level=vocabulary_level, style=tuple(style))


def format_section_outline(sections: Sequence[SectionOutline]) -> str:
    """Render sections as a numbered list with per-section word targets."""
    return "".join(
        f"\n{i}. {s.title}: {s.summary} (~{s.target_word_count} words)"
        for i, s in enumerate(sections, start=1)
    )


def build_chapter_prompt(
    book_context: BookContext,
    chapter_title: str,
    chapter_summary: str,
    target_word_count: int,
    voice_profile: Optional[VoiceProfile] = None,
    previous_chapter_summary: Optional[str] = None,
    section_outline: Optional[Sequence[SectionOutline]] = None,
) -> tuple[str, str]:
    """Build (system_instructions, user_message) for one chapter.

    Args:
        book_context: Owning book's title, type, audience and stored voice.
        chapter_title: Title of the chapter to write.
        chapter_summary: What the chapter covers.
        target_word_count: Approximate length to aim for.
        voice_profile: Per-call override of the book's voice.
        previous_chapter_summary: Context from the preceding chapter.
        section_outline: Sections the output should be organized into.
    """
    voice = resolve_voice(voice_profile, book_context.voice_profile)

    lines = [
        f'You are an expert author writing a chapter for "{book_context.title}".',
        f"This is a {book_context.book_type} book targeting: "
        f"{book_context.target_audience or DEFAULT_AUDIENCE}.",
        "",
        "Writing style requirements:",
        f"- Tone: {voice.tone}",
        f"- Vocabulary level: {voice.vocabulary_level}",
    ]
    if voice.style:
        lines.append(f"- Style: {', '.join(voice.style)}")
    lines.extend([
        "- Write engaging, professional content",
        "- Use clear paragraph breaks",
        "- Include relevant examples and explanations",
        "- Maintain consistent voice throughout",
        "",
        f"Target word count: approximately {target_word_count} words.",
    ])

    if section_outline:
        lines.append("")
        lines.append(f"Follow this section structure:{format_section_outline(section_outline)}")

    lines.extend([
        "",
        "Write the complete chapter content. Use markdown formatting for headings (##, ###), "
        "emphasis (*italic*, **bold**), and lists where appropriate.",
        "Do NOT include the chapter title as a heading - it will be added separately.",
    ])

    if previous_chapter_summary:
        lines.append("")
        lines.append(f"Previous chapter context: {previous_chapter_summary}")

    user_message = (
        f'Write Chapter: "{chapter_title}"\n\n'
        f"Chapter summary: {chapter_summary}\n\n"
        "Write the complete chapter now."
    )
    return "\n".join(lines), user_message
