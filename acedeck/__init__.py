"""acedeck: study notes, practice questions and narration from generative AI."""

__version__ = "1.0.0"
