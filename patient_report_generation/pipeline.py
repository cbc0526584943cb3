"""
Patient Document Pipeline - Main Orchestrator

This is the PUBLIC API entry point for the patient document system. It
coordinates the repository, prompt building and generation layers behind
a small interface used by request handlers and the command-line script.

Architecture Diagram:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                      PatientDocumentPipeline                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   ┌───────────┐    ┌──────────────┐    ┌──────────┐    ┌────────┐   │
    │   │Repository │ →  │ Capabilities │ →  │  Prompt  │ →  │  LLM   │   │
    │   └───────────┘    └──────────────┘    └──────────┘    └────────┘   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Concurrency:
    Each call reads its own copy of the patient record from the repository.
    Prompt assembly is pure, so concurrent calls for the same or different
    patients do not interact. The only I/O is the single LLM call.

Usage:
    from patient_report_generation import PatientDocumentPipeline, Capabilities

    pipeline = PatientDocumentPipeline.from_environment()
    report = pipeline.generate_patient_report("1", Capabilities.full_access())
    pipeline.save_document(report)

Author: Shubham Singh
Date: January 2026
"""

import dataclasses
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from patient_report_generation.clients import GeminiClient, LLMClientProtocol, OpenAIClient
from patient_report_generation.core.config import PipelineConfiguration
from patient_report_generation.core.enums import DocumentKind
from patient_report_generation.core.exceptions import (
    ConfigurationError,
    DocumentSaveError,
    GenerationError,
)
from patient_report_generation.core.models import (
    BillingDetails,
    GeneratedDocument,
    PatientRecord,
    PromptDocument,
)
from patient_report_generation.core.permissions import Capabilities
from patient_report_generation.generation import DocumentGenerator, PromptBuilder
from patient_report_generation.repository import (
    InMemoryPatientRepository,
    PatientRepository,
)


# =============================================================================
# STAGE 1: PIPELINE CLASS
# =============================================================================


class PatientDocumentPipeline:
    """
    Main orchestrator for patient summaries and reports.

    How it works:
        STAGE 1: Initialize repository and generator from configuration
        STAGE 2: On each request:
            2.1 Check the caller's capabilities
            2.2 Load a copy of the patient record
            2.3 Withhold background if the caller may not view it
            2.4 Generate the document (single LLM call)

    Example:
        >>> pipeline = PatientDocumentPipeline.from_environment()
        >>> summary = pipeline.summarize_patient("1", Capabilities.full_access())
        >>> print(summary.content)
    """

    def __init__(
        self,
        config: PipelineConfiguration,
        repository: Optional[PatientRepository] = None,
        generator: Optional[DocumentGenerator] = None,
        llm_client: Optional[LLMClientProtocol] = None,
    ):
        """
        Initialize pipeline with configuration and optional component overrides.

        Args:
            config: Pipeline configuration
            repository: Optional repository override (for testing)
            generator: Optional generator override (for testing)
            llm_client: Optional LLM client override; ignored when generator is given
        """
        # =====================================================================
        # STAGE 1.1: STORE CONFIGURATION
        # =====================================================================
        self._config = config

        # =====================================================================
        # STAGE 1.2: INITIALIZE REPOSITORY
        # =====================================================================
        if repository is not None:
            self._repository = repository
        else:
            self._repository = self._create_repository(config)

        # =====================================================================
        # STAGE 1.3: INITIALIZE GENERATOR (LLM CLIENT CREATED LAZILY)
        # =====================================================================
        self._generator = generator
        self._llm_client = llm_client
        self._prompt_builder = PromptBuilder()

        # =====================================================================
        # STAGE 1.4: TRACKING STATE
        # =====================================================================
        self._documents_generated = 0
        self._generation_failures = 0

        logger.info(
            f"PatientDocumentPipeline initialized | "
            f"Provider: {config.llm_provider} | "
            f"Model: {config.active_model}"
        )

    # =========================================================================
    # STAGE 2: MAIN GENERATION API
    # =========================================================================

    def summarize_patient(self, patient_id: str, capabilities: Capabilities) -> GeneratedDocument:
        """
        Generate the concise summary for a patient.

        Raises:
            PermissionDeniedError: If the caller may not generate documents
            PatientNotFoundError: If the patient does not exist
            GenerationError: If the text generator fails
        """
        return self._generate(patient_id, DocumentKind.SUMMARY, capabilities)

    def generate_patient_report(
        self, patient_id: str, capabilities: Capabilities
    ) -> GeneratedDocument:
        """
        Generate the full Markdown report for a patient.

        Raises:
            PermissionDeniedError: If the caller may not generate documents
            PatientNotFoundError: If the patient does not exist
            GenerationError: If the text generator fails
        """
        return self._generate(patient_id, DocumentKind.REPORT, capabilities)

    def preview_prompt(
        self, patient_id: str, kind: DocumentKind, capabilities: Capabilities
    ) -> PromptDocument:
        """
        Build the prompt that would be sent, without calling the LLM.

        Raises:
            PermissionDeniedError: If the caller may not generate documents
            PatientNotFoundError: If the patient does not exist
        """
        record = self._load_for(patient_id, capabilities)
        if self._generator is not None:
            return self._generator.build_prompt(record, kind)
        return self._prompt_builder.build_for_record(record, kind)

    def _generate(
        self, patient_id: str, kind: DocumentKind, capabilities: Capabilities
    ) -> GeneratedDocument:
        record = self._load_for(patient_id, capabilities)

        try:
            document = self.generator.generate(record, kind)
        except GenerationError:
            self._generation_failures += 1
            raise

        self._documents_generated += 1
        return document

    def _load_for(self, patient_id: str, capabilities: Capabilities) -> PatientRecord:
        capabilities.require("can_generate_documents")
        record = self._repository.get_patient_or_raise(patient_id)

        if record.background is not None and not capabilities.can_view_background:
            logger.info(f"Background withheld from prompt | Patient: {patient_id}")
            record = dataclasses.replace(record, background=None)

        return record

    # =========================================================================
    # STAGE 3: BILLING EDITS AND SAVED DOCUMENTS
    # =========================================================================

    def update_billing(
        self, patient_id: str, billing: Optional[BillingDetails], capabilities: Capabilities
    ) -> PatientRecord:
        """
        Replace a patient's billing details.

        Passing billing=None clears the block, which also drops the billing
        section from future report prompts.

        Raises:
            PermissionDeniedError: If the caller may not edit billing
            PatientNotFoundError: If the patient does not exist
        """
        capabilities.require("can_edit_billing")
        record = self._repository.update_patient(patient_id, billing=billing)

        logger.info(
            f"Billing updated | Patient: {patient_id} | "
            f"Tax ID present: {bool(billing and billing.has_tax_id)}"
        )
        return record

    def save_document(self, document: GeneratedDocument, output_dir: Optional[str] = None) -> str:
        """
        Write a generated document to disk under its suggested file name.

        Args:
            document: Document to save
            output_dir: Directory to save to (uses config default if not specified)

        Returns:
            Path to saved file

        Raises:
            DocumentSaveError: If the directory or file cannot be written
        """
        dir_path = Path(output_dir or self._config.output_directory)
        filepath = dir_path / document.suggested_filename()

        try:
            dir_path.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(document.content)
        except OSError as e:
            raise DocumentSaveError(str(filepath), str(e))

        logger.info(f"Saved {document.kind.value} to {filepath}")
        return str(filepath)

    # =========================================================================
    # STAGE 4: FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_environment(
        cls, env_file: Optional[str] = None, require_api_key: bool = True
    ) -> "PatientDocumentPipeline":
        """
        Create pipeline from environment configuration.

        Args:
            env_file: Path to .env file (optional)
            require_api_key: Set False for prompt previews without an API key

        Raises:
            ConfigurationError: If required settings missing
        """
        config = PipelineConfiguration.from_environment(
            env_file=env_file, validate_on_load=True, require_api_key=require_api_key
        )
        return cls(config)

    # =========================================================================
    # STAGE 5: PRIVATE HELPERS
    # =========================================================================

    def _create_repository(self, config: PipelineConfiguration) -> PatientRepository:
        """Create repository from configuration."""
        if config.patient_dataset_path:
            return InMemoryPatientRepository.from_json_file(config.patient_dataset_path)
        return InMemoryPatientRepository()

    def _create_llm_client(self, config: PipelineConfiguration) -> LLMClientProtocol:
        """Create LLM client from configuration."""
        if config.llm_provider == "gemini":
            if not config.gemini_api_key:
                raise ConfigurationError(
                    "Gemini API key required", context={"setting": "GEMINI_API_KEY"}
                )
            return GeminiClient(
                api_key=config.gemini_api_key,
                model_name=config.gemini_model,
                rate_limit_delay=config.rate_limit_delay,
                max_retries=config.max_retries,
            )
        if config.llm_provider == "openai":
            if not config.openai_api_key:
                raise ConfigurationError(
                    "OpenAI API key required", context={"setting": "OPENAI_API_KEY"}
                )
            return OpenAIClient(
                api_key=config.openai_api_key,
                model_name=config.openai_model,
                rate_limit_delay=config.rate_limit_delay,
                max_retries=config.max_retries,
            )
        raise ConfigurationError(
            f"Unsupported LLM provider: {config.llm_provider}",
            context={"supported": ["gemini", "openai"]},
        )

    # =========================================================================
    # STAGE 6: PROPERTIES AND METRICS
    # =========================================================================

    @property
    def generator(self) -> DocumentGenerator:
        """Document generator, created on first use so previews need no API key."""
        if self._generator is None:
            if self._llm_client is None:
                self._llm_client = self._create_llm_client(self._config)
            self._generator = DocumentGenerator(llm_client=self._llm_client)
        return self._generator

    @property
    def documents_generated(self) -> int:
        return self._documents_generated

    @property
    def generation_failures(self) -> int:
        return self._generation_failures

    @property
    def llm_metrics(self) -> Optional[Dict[str, Any]]:
        """
        Call counters of the LLM client, or None before the client exists.

        Clients without counters (e.g. test doubles) also give None.
        """
        client = self._llm_client
        if client is None and self._generator is not None:
            client = self._generator.llm_client
        if client is None or not hasattr(client, "success_rate"):
            return None
        return {
            "provider": client.provider_name,
            "total_calls": client.total_calls,
            "failed_calls": client.failed_calls,
            "success_rate": client.success_rate,
        }

    @property
    def config(self) -> PipelineConfiguration:
        return self._config

    @property
    def repository(self) -> PatientRepository:
        return self._repository


# =============================================================================
# STAGE 7: SMOKE TEST
# =============================================================================

if __name__ == "__main__":
    import sys

    logger.remove()
    logger.add(sys.stderr, level="INFO")

    print("\n--- Patient Document Pipeline Smoke Test ---\n")

    try:
        # 1. Initialize Pipeline (prompt preview needs no API key)
        print("1. Initializing pipeline from environment...")
        pipeline = PatientDocumentPipeline.from_environment(require_api_key=False)
        print("   [OK] Pipeline initialized successfully")

        # 2. Inspect Configuration
        config = pipeline.config
        print("\n2. Configuration loaded:")
        print(f"   - LLM Provider: {config.llm_provider}")
        print(f"   - Model: {config.active_model}")
        print(f"   - Dataset: {config.patient_dataset_path}")
        print(f"   - Output Dir: {config.output_directory}")

        # 3. Inspect Repository
        patients = pipeline.repository.list_patients()
        print("\n3. Repository status:")
        print(f"   - Total patients: {len(patients)}")
        for record in patients:
            print(f"     * {record.patient_id}: {record.full_name} ({record.encounter_count} encounters)")

        # 4. Preview a report prompt
        if patients:
            print("\n4. Previewing report prompt for first patient...")
            prompt = pipeline.preview_prompt(
                patients[0].patient_id, DocumentKind.REPORT, Capabilities.full_access()
            )
            print(f"   - Sections: {prompt.section_keys}")
            print(f"   - Length: {len(prompt.text)} chars")
            print("   [OK] Prompt assembly working")

        print("\n[OK] SMOKE TEST PASSED: System is ready for generation.")

    except Exception as e:
        print(f"\n[FAIL] SMOKE TEST FAILED: {e}")
        import traceback

        traceback.print_exc()
        sys.exit(1)
