"""Fixtures for extraction and import tests."""

import random

import fitz
import pytest

from courseflow.db.ledger import GradeLedger
from courseflow.db.store import InMemoryStore

SYLLABUS_TEXT = """\
CS 101 Introduction to Programming
Instructor: Dr. Jane Smith

Grading
Quiz 1 (Feb 1) 5%
Quiz 2 (Feb 15) 5%
Assignment 1 due March 15 15%
Midterm exam March 1 25%
Final exam May 10 35%
"""


@pytest.fixture
def ledger():
    return GradeLedger(InMemoryStore(), rng=random.Random(0))


@pytest.fixture
def syllabus_text() -> str:
    return SYLLABUS_TEXT


@pytest.fixture
def syllabus_txt(tmp_path, syllabus_text):
    path = tmp_path / "syllabus.txt"
    path.write_text(syllabus_text, encoding="utf-8")
    return path


@pytest.fixture
def syllabus_pdf(tmp_path, syllabus_text):
    """Single-page PDF with a text layer."""
    path = tmp_path / "syllabus.pdf"
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), syllabus_text, fontsize=11)
    doc.save(path)
    doc.close()
    return path


@pytest.fixture
def blank_pdf(tmp_path):
    """PDF without any text, like a scan."""
    path = tmp_path / "scan.pdf"
    doc = fitz.open()
    doc.new_page()
    doc.save(path)
    doc.close()
    return path
