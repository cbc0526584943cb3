"""
Generate Patient Summaries and Reports

This script generates the AI-written documents for one patient (or every
patient in the dataset) and saves them as Markdown files.

Documents:
    1. summary: Concise clinical summary of the patient record
    2. report: Full medical report with blank conclusions for the physician

Usage:
    python generate_patient_documents.py --patient-id 1 --kind report
    python generate_patient_documents.py --kind both
    python generate_patient_documents.py --patient-id 3 --kind summary --preview

Author: Shubham Singh
Date: January 2026
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger

from patient_report_generation.core.config import PipelineConfiguration
from patient_report_generation.core.enums import DocumentKind
from patient_report_generation.core.exceptions import PatientDocumentError
from patient_report_generation.core.permissions import Capabilities
from patient_report_generation.pipeline import PatientDocumentPipeline


KIND_CHOICES = {
    "summary": [DocumentKind.SUMMARY],
    "report": [DocumentKind.REPORT],
    "both": [DocumentKind.SUMMARY, DocumentKind.REPORT],
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate AI patient summaries and medical reports."
    )
    parser.add_argument(
        "--patient-id",
        help="Patient to process (default: every patient in the dataset)",
    )
    parser.add_argument(
        "--kind",
        choices=sorted(KIND_CHOICES),
        default="both",
        help="Which document(s) to generate",
    )
    parser.add_argument("--dataset", help="Patient JSON dataset (overrides PATIENT_DATASET_PATH)")
    parser.add_argument("--output-dir", help="Directory for saved documents")
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Print the assembled prompt(s) without calling the LLM",
    )
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--log-level", default="INFO", help="Logger level (default: INFO)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Generate the requested documents. Returns the process exit code."""
    args = parse_args(argv)

    # Configure logger for clean output
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    print("\n" + "=" * 80)
    print("PATIENT DOCUMENT GENERATION")
    print("=" * 80 + "\n")

    # =========================================================================
    # STAGE 1: INITIALIZE PIPELINE
    # =========================================================================
    print("STAGE 1: Initializing pipeline from environment...")
    try:
        pipeline = _build_pipeline(args)
        print("[OK] Pipeline initialized successfully")
        print(f"  - LLM Provider: {pipeline.config.llm_provider}")
        print(f"  - Model: {pipeline.config.active_model}")
        print(f"  - Dataset: {pipeline.config.patient_dataset_path}")
        print()
    except PatientDocumentError as e:
        print(f"[FAIL] Failed to initialize pipeline: {e}")
        return 1

    # =========================================================================
    # STAGE 2: RESOLVE PATIENTS AND DOCUMENT KINDS
    # =========================================================================
    if args.patient_id:
        patient_ids = [args.patient_id]
    else:
        patient_ids = [record.patient_id for record in pipeline.repository.list_patients()]

    kinds = KIND_CHOICES[args.kind]
    capabilities = Capabilities.full_access()

    print("STAGE 2: Generation Plan")
    print(f"  - Patients: {len(patient_ids)}")
    print(f"  - Documents: {', '.join(kind.value for kind in kinds)}")
    print(f"  - Mode: {'preview' if args.preview else 'generate'}")
    print()

    # =========================================================================
    # STAGE 3: GENERATE OR PREVIEW
    # =========================================================================
    print("STAGE 3: Processing patients...\n")

    saved_paths = []
    failures = 0

    for idx, patient_id in enumerate(patient_ids, 1):
        print(f"[{idx}/{len(patient_ids)}] Patient: {patient_id}")
        print("-" * 80)

        for kind in kinds:
            try:
                if args.preview:
                    prompt = pipeline.preview_prompt(patient_id, kind, capabilities)
                    print(prompt.text)
                    print()
                    continue

                if kind == DocumentKind.SUMMARY:
                    document = pipeline.summarize_patient(patient_id, capabilities)
                else:
                    document = pipeline.generate_patient_report(patient_id, capabilities)

                path = pipeline.save_document(document, output_dir=args.output_dir)
                saved_paths.append(path)
                print(f"[OK] {kind.value}: {path} ({len(document.content)} chars)")

            except PatientDocumentError as e:
                failures += 1
                print(f"[FAIL] {kind.value} for patient {patient_id}: {e}")
                logger.exception(f"Error generating {kind.value} | Patient: {patient_id}")

        print()

    # =========================================================================
    # STAGE 4: SUMMARY
    # =========================================================================
    print("=" * 80)
    print("STAGE 4: Generation Summary")
    print("=" * 80 + "\n")

    if not args.preview:
        print(f"  - Documents generated: {pipeline.documents_generated}")
        print(f"  - Generation failures: {pipeline.generation_failures}")
        print(f"  - Files saved: {len(saved_paths)}")
        metrics = pipeline.llm_metrics
        if metrics:
            print(
                f"  - LLM calls ({metrics['provider']}): {metrics['total_calls']} ok, "
                f"{metrics['failed_calls']} failed ({metrics['success_rate']:.1f}% success)"
            )
        print()

    if failures:
        print(f"[FAIL] COMPLETED WITH {failures} FAILURE(S)")
        print("=" * 80 + "\n")
        return 1

    print("[OK] GENERATION SUCCESSFUL")
    print("=" * 80 + "\n")
    return 0


def _build_pipeline(args: argparse.Namespace) -> PatientDocumentPipeline:
    config = PipelineConfiguration.from_environment(env_file=args.env_file, validate_on_load=False)
    if args.dataset:
        config.patient_dataset_path = args.dataset
    if args.output_dir:
        config.output_directory = args.output_dir
    config.validate(require_api_key=not args.preview)
    return PatientDocumentPipeline(config)


if __name__ == "__main__":
    sys.exit(main())
