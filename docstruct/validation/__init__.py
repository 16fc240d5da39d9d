"""Structure validation rules, registry and corrections."""

from docstruct.validation.registry import RuleRegistry
from docstruct.validation.rules import (
    check_basic_structure,
    check_chapter_structure,
    check_paragraph_structure,
    check_sentence_structure,
    check_structure_coherence,
)
from docstruct.validation.validator import StructureValidator

__all__ = [
    "RuleRegistry",
    "StructureValidator",
    "check_basic_structure",
    "check_chapter_structure",
    "check_paragraph_structure",
    "check_sentence_structure",
    "check_structure_coherence",
]
