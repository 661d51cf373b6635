"""CourseFlow: syllabus ingestion and grade tracking."""

__version__ = "0.1.0"
