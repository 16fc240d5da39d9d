"""Entry point: normalize a document and report its structure validation.

Usage:
    python run.py <file> [--config config.yaml] [--json]
"""

import argparse
import json
import logging
import sys

from docstruct.config import load_config
from docstruct.ingestion import DocumentAssembler, Segmenter, TextDocumentParser
from docstruct.validation import StructureValidator

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Normalize a document into chapters, paragraphs and sentences"
    )
    parser.add_argument("file", help="Path to a .txt, .md or .html document")
    parser.add_argument(
        "--config", default="config.yaml", help="Path to the YAML configuration file"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print structure and validation as JSON"
    )
    args = parser.parse_args()

    config = load_config(args.config)
    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    try:
        raw_document = TextDocumentParser().parse(args.file)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    assembler = DocumentAssembler(segmenter=Segmenter(config=config.segmentation))
    structure = assembler.assemble(raw_document)
    validation = StructureValidator(config=config.validation).validate_structure(structure)

    if args.json:
        payload = {
            "structure": structure.model_dump(mode="json"),
            "validation": validation.model_dump(mode="json"),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0 if validation.is_valid else 2

    print(f"Title:       {structure.metadata.title}")
    print(f"Chapters:    {structure.total_chapters}")
    print(f"Paragraphs:  {structure.total_paragraphs}")
    print(f"Sentences:   {structure.total_sentences}")
    print(f"Words:       {structure.total_word_count}")
    print(f"Duration:    {structure.estimated_total_duration:.0f}s")
    print(f"Confidence:  {structure.confidence:.2f}")
    print()
    for entry in structure.table_of_contents:
        print(f"{'  ' * (entry.level - 1)}- {entry.title}")
    print()
    print(f"Valid:       {validation.is_valid} (score {validation.overall_score:.2f})")
    for issue in [*validation.errors, *validation.warnings]:
        print(f"  [{issue.severity}] {issue.code} at {issue.location.describe()}: {issue.message}")
    for recommendation in validation.recommendations:
        print(f"  * {recommendation}")

    return 0 if validation.is_valid else 2


if __name__ == "__main__":
    sys.exit(main())
