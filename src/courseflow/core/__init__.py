"""Core business logic.

Modules:
- text_normalizer: course / assessment name cleanup
- response_parser: LLM outline -> ParsedSyllabus
- grades: weighted grade and required-grade projection
- colors: course color assignment
- document_extractor: PDF / text file -> plaintext
- syllabus_extractor: plaintext -> LLM outline
- syllabus_importer: end-to-end import into the ledger
- calendar_export: ICS export and calendar views
- grade_sync: secondary in-memory grade service
"""

__all__ = [
    "text_normalizer",
    "response_parser",
    "grades",
    "colors",
    "document_extractor",
    "syllabus_extractor",
    "syllabus_importer",
    "calendar_export",
    "grade_sync",
]
