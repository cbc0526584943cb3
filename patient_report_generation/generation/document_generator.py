"""
Document Generator - Summary and Report Generation with LLM

This module hands assembled prompt documents to the text-generation
collaborator and wraps the single text field it returns.

Why Separate from Prompt Builder:
    1. Single Responsibility: prompt assembly is pure, this class does I/O
    2. Dependency injection: LLM client is injected
    3. Error handling: collaborator failures are surfaced in one place

Failure Policy:
    The generator calls the collaborator exactly once per document and
    never retries. LLMError subclasses propagate unchanged; anything else
    (including a non-string result) becomes a GenerationError.

Pipeline Position:
    Repository → EncounterFormatter → PromptBuilder → [DocumentGenerator]
                                                       ^^^^^^^^^^^^^^^^^
                                                       You are here

Author: Shubham Singh
Date: January 2026
"""

from datetime import datetime
from typing import Optional

from loguru import logger

from patient_report_generation.clients.llm_client import LLMClientProtocol
from patient_report_generation.core.enums import DocumentKind
from patient_report_generation.core.exceptions import GenerationError, LLMError
from patient_report_generation.core.models import GeneratedDocument, PatientRecord, PromptDocument
from patient_report_generation.generation.encounter_formatter import find_unparsable_dates
from patient_report_generation.generation.prompt_builder import PromptBuilder


class DocumentGenerator:
    """
    Generates patient summaries and reports using an LLM.

    How it works:
        STAGE 1: Build the prompt document with PromptBuilder
        STAGE 2: Warn about encounter dates shown verbatim
        STAGE 3: Call the collaborator once for the kind's output field
        STAGE 4: Wrap the text in a GeneratedDocument

    Example:
        >>> generator = DocumentGenerator(llm_client)
        >>> report = generator.generate_report(record)
        >>> report.suggested_filename()
        'Informe_Maria_Gonzalez_Perez_2024-03-01.md'
    """

    def __init__(
        self, llm_client: LLMClientProtocol, prompt_builder: Optional[PromptBuilder] = None
    ):
        """
        Initialize the document generator.

        Args:
            llm_client: Text-generation collaborator
            prompt_builder: Optional builder override (for custom section sequences)
        """
        self._llm_client = llm_client
        self._prompt_builder = prompt_builder or PromptBuilder()

        self._generation_count = 0
        self._failure_count = 0

        logger.debug(f"DocumentGenerator initialized | Model: {self._get_model_name()}")

    # =========================================================================
    # STAGE 1: MAIN GENERATION API
    # =========================================================================

    def generate_summary(self, record: PatientRecord) -> GeneratedDocument:
        """Generate the concise summary for a patient record."""
        return self.generate(record, DocumentKind.SUMMARY)

    def generate_report(self, record: PatientRecord) -> GeneratedDocument:
        """Generate the full Markdown report for a patient record."""
        return self.generate(record, DocumentKind.REPORT)

    def build_prompt(self, record: PatientRecord, kind: DocumentKind) -> PromptDocument:
        """
        Build the prompt document without calling the LLM.

        Encounters whose dates cannot be parsed are logged here; the prompt
        still shows their raw stored value.
        """
        unparsable = find_unparsable_dates(record.encounters)
        for encounter_id in unparsable:
            logger.warning(
                f"Unparsable encounter date, using raw value | "
                f"Patient: {record.patient_id} | Encounter: {encounter_id}"
            )

        return self._prompt_builder.build_for_record(record, kind)

    def generate(self, record: PatientRecord, kind: DocumentKind) -> GeneratedDocument:
        """
        Generate a document of the given kind.

        Args:
            record: Patient record snapshot (not modified)
            kind: SUMMARY or REPORT

        Returns:
            GeneratedDocument with the collaborator's text

        Raises:
            LLMError: Collaborator failure, propagated unchanged
            GenerationError: Any other failure, or a non-string result
        """
        # =====================================================================
        # STAGE 1.1: BUILD PROMPT
        # =====================================================================
        if not record.encounters:
            logger.info(f"Generating {kind.value} with no encounters | Patient: {record.patient_id}")

        prompt = self.build_prompt(record, kind)

        logger.info(
            f"Generating {kind.value} | "
            f"Patient: {record.patient_id} | "
            f"Encounters: {record.encounter_count} | "
            f"Sections: {prompt.section_keys}"
        )

        # =====================================================================
        # STAGE 1.2: CALL COLLABORATOR ONCE
        # =====================================================================
        content = self._call_llm(prompt, record.patient_id)

        # =====================================================================
        # STAGE 1.3: WRAP RESULT
        # =====================================================================
        self._generation_count += 1

        document = GeneratedDocument(
            kind=kind,
            patient_id=record.patient_id,
            patient_name=record.full_name,
            content=content,
            generated_at=datetime.now(),
            generation_model=self._get_model_name(),
        )

        logger.info(
            f"Generated {kind.value} | "
            f"Patient: {record.patient_id} | "
            f"Length: {len(content)} chars"
        )

        return document

    # =========================================================================
    # STAGE 2: LLM INTERACTION
    # =========================================================================

    def _call_llm(self, prompt: PromptDocument, patient_id: str) -> str:
        try:
            result = self._llm_client.generate_structured(prompt.text, prompt.output_field)

        except LLMError as e:
            self._failure_count += 1
            logger.error(f"Generation failed | Patient: {patient_id} | {e}")
            raise

        except Exception as e:
            self._failure_count += 1
            logger.error(f"Unexpected generation error | Patient: {patient_id} | {e}")
            raise GenerationError(
                f"Unexpected error during {prompt.kind.value} generation: {e}",
                context={"patient_id": patient_id, "original_error": str(e)},
            ) from e

        if not isinstance(result, str):
            self._failure_count += 1
            raise GenerationError(
                f"Generator returned no {prompt.output_field} text",
                context={"patient_id": patient_id, "result_type": type(result).__name__},
            )

        if not result.strip():
            logger.warning(f"Generator returned empty {prompt.output_field} | Patient: {patient_id}")

        return result

    def _get_model_name(self) -> str:
        """Get model name from LLM client if available."""
        return getattr(self._llm_client, "model_name", "unknown")

    # =========================================================================
    # STAGE 3: STATISTICS
    # =========================================================================

    @property
    def generation_count(self) -> int:
        """Number of documents generated."""
        return self._generation_count

    @property
    def failure_count(self) -> int:
        """Number of failed generation attempts."""
        return self._failure_count

    @property
    def llm_client(self) -> LLMClientProtocol:
        return self._llm_client
