"""newsdesk — auto-processing pipeline for a bilingual (English/Khmer) news editor."""

__version__ = "0.1.0"
