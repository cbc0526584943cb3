"""
Generation Layer - Patient Document Generation

This layer turns patient records into prompt documents and hands them to
the text-generation collaborator.

Submodules:
    encounter_formatter.py → Chronological encounter digest
    prompt_builder.py      → Section builders, summary and report prompts
    document_generator.py  → LLM call and result wrapping

Dependency Rule:
    This layer depends on: core, clients (LLM protocol)
    This layer is used by: pipeline (orchestrator)

Author: Shubham Singh
Date: January 2026
"""

from patient_report_generation.generation.encounter_formatter import (
    format_encounters,
    sort_encounters,
    find_unparsable_dates,
)
from patient_report_generation.generation.prompt_builder import (
    PromptBuilder,
    PromptInput,
    build_summary_prompt,
    build_report_prompt,
)
from patient_report_generation.generation.document_generator import DocumentGenerator

__all__ = [
    "format_encounters",
    "sort_encounters",
    "find_unparsable_dates",
    "PromptBuilder",
    "PromptInput",
    "build_summary_prompt",
    "build_report_prompt",
    "DocumentGenerator",
]
