"""Prompt builders shared by every transport.

Bounded Context: Study Content Generation
"""

from acedeck.domain.models.common import PromptText

TUTOR_SYSTEM_INSTRUCTION = "You are AceBot, an expert Class 12 AI Tutor. Use Hinglish."


def is_maths(subject: str) -> bool:
    return "math" in subject.lower()


def notes_prompt(subject: str, chapter: str) -> PromptText:
    """Prompt for complete chapter notes; maths gets a stricter structure."""
    if is_maths(subject):
        pedagogy = "FOR MATHS: Use this structure: 1. TOPIC 2. INTRO 3. FORMULA 4. EXAMPLE. Use plain text formulas."
    else:
        pedagogy = (
            f"FOR {subject}: Cover ALL topics in detail using TOPIC:, INTRO:, DEFINITION:, "
            "FORMULA:, and EXAMPLE: markers."
        )
    return PromptText(
        "Act as a Class 12 CBSE Expert Educator.\n"
        f"Subject: {subject}\n"
        f"Chapter: {chapter}\n"
        "TASK: Generate complete syllabus study notes for 2026 Board Exams.\n"
        "STRICT RULES:\n"
        "1. NO SPECIAL SYMBOLS ($ or \\). Write formulas in plain text.\n"
        f"2. {pedagogy}\n"
        "3. Include every NCERT topic."
    )


def questions_prompt(subject: str, chapter: str) -> PromptText:
    """Prompt for previous-year style questions with point-wise solutions."""
    return PromptText(
        "Act as an Exam Strategy Expert analyzing Class 12 CBSE questions from 4,250+ last 15 years papers.\n"
        f"Subject: {subject}\n"
        f"Chapter: {chapter}\n"
        "PRIORITY: 2020-2025 (Last 5 years) first, then older.\n"
        "TASK: Generate ~20-25 high-impact questions with point-wise solutions.\n"
        "Start every question with QUESTION:.\n"
        "STRICT: NO $ SYMBOLS. Use [CBSE YEAR] tags."
    )


def narration_prompt(subject: str, source_text: str) -> PromptText:
    return PromptText(
        f'Explain this {subject} chapter in "Hinglish" (mix of Hindi/English) '
        f"like a friendly Indian teacher: {source_text}"
    )


def formula_image_prompt(description: str) -> PromptText:
    return PromptText(f"Sharp black mathematical formula on white background: {description}")
