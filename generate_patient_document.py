"""
Patient Document Generator CLI

Command-line interface for turning a technical clinical note and a patient
profile into a validated, patient-facing document.

Usage:
    python generate_patient_document.py --note note.txt --profile profile.json
    cat note.txt | python generate_patient_document.py --format text

Exit Codes:
    0 → document generated and validated
    1 → terminal failure (input, upstream, malformed response, validation)
    2 → configuration error

Author: Shubham Singh
Date: October 2026
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from patient_document_generation import PatientDocumentPipeline, PipelineConfiguration
from patient_document_generation.core.constants import LOG_FORMAT
from patient_document_generation.core.exceptions import ConfigurationError
from patient_document_generation.presentation import document_to_text
from patient_document_generation.profile import normalize_profile

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Step 1: Create ArgumentParser with description
    Step 2: Add input arguments (note, profile)
    Step 3: Add backend arguments (provider, env-file)
    Step 4: Add output arguments (output, format, log-level)

    Returns:
        ArgumentParser: Configured argument parser
    """
    # Step 1: Create ArgumentParser with description
    parser = argparse.ArgumentParser(
        description="Generate a validated patient-facing document from a technical note",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Generate from files:
    python generate_patient_document.py --note note.txt --profile profile.json

  Read the note from stdin and print section text:
    cat note.txt | python generate_patient_document.py --format text

  Use an OpenAI-compatible backend:
    python generate_patient_document.py --provider openai --note note.txt

Profile JSON example:
  {"age": 72, "language": "estonian", "healthLiteracy": "low",
   "journeyType": "emergency", "mentalState": "anxious"}

Requirements:
  - GEMINI_API_KEY or OPENAI_API_KEY in the environment or a .env file
  - See .env.example for all settings
        """,
    )

    # Step 2: Add input arguments
    parser.add_argument(
        "--note",
        type=str,
        default=None,
        help="Path to the technical note text file (default: read from stdin)",
    )
    parser.add_argument(
        "--profile",
        type=str,
        default=None,
        help="Path to a JSON file with the patient profile (default: all defaults)",
    )

    # Step 3: Add backend arguments
    parser.add_argument(
        "--provider",
        type=str,
        choices=["gemini", "openai"],
        default=None,
        help="LLM provider (default: LLM_PROVIDER from the environment)",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (default: auto-detected)",
    )

    # Step 4: Add output arguments
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the result to this file instead of stdout",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "text"],
        default="json",
        help="json: response object; text: titled sections (default: json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL from the environment, else INFO)",
    )

    return parser


def setup_logging(level: str) -> None:
    """Send loguru output to stderr so stdout carries only the result."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)


def read_note(path: Optional[str]) -> str:
    if path is None:
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def read_profile(path: Optional[str]) -> Dict[str, Any]:
    """
    Load the patient profile JSON file.

    Raises:
        ValueError: If the file is not a JSON object
    """
    if path is None:
        return {}
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Profile file must contain a JSON object: {path}")
    return data


def load_configuration(args: argparse.Namespace) -> PipelineConfiguration:
    """
    Load configuration from the environment and apply CLI overrides.

    Raises:
        ConfigurationError: If the resulting configuration is invalid
    """
    configuration = PipelineConfiguration.from_environment(
        env_file=args.env_file, validate_on_load=False
    )
    if args.provider:
        configuration.llm_provider = args.provider
    if args.log_level:
        configuration.log_level = args.log_level.upper()
    configuration.validate()
    return configuration


def write_output(content: str, path: Optional[str]) -> None:
    if path is None:
        sys.stdout.write(content + "\n")
        return
    Path(path).write_text(content + "\n", encoding="utf-8")
    logger.info(f"Output saved to: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the patient document generation CLI.

    Step 1: Parse command-line arguments
    Step 2: Load configuration
    Step 3: Read note and profile
    Step 4: Generate document
    Step 5: Write result

    Returns:
        Process exit code
    """
    # Step 1: Parse command-line arguments
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level or "INFO")

    # Step 2: Load configuration
    try:
        configuration = load_configuration(args)
    except ConfigurationError as error:
        logger.error(f"Configuration error: {error}")
        return EXIT_CONFIGURATION_ERROR
    setup_logging(configuration.log_level)

    # Step 3: Read note and profile
    try:
        technical_note = read_note(args.note)
        profile = read_profile(args.profile)
    except (OSError, ValueError) as error:
        logger.error(f"Invalid input: {error}")
        return EXIT_FAILURE

    # Step 4: Generate document
    try:
        pipeline = PatientDocumentPipeline(configuration)
    except ConfigurationError as error:
        logger.error(f"Configuration error: {error}")
        return EXIT_CONFIGURATION_ERROR

    outcome = pipeline.generate(technical_note, profile)

    # Step 5: Write result
    if args.format == "text" and outcome.succeeded:
        language = normalize_profile(profile).language
        write_output(document_to_text(outcome.document, language), args.output)
    else:
        write_output(json.dumps(outcome.to_response(), ensure_ascii=False, indent=2), args.output)

    if not outcome.succeeded:
        logger.error(f"Generation failed: {outcome.error}")
        for error in outcome.validation_errors or []:
            logger.error(f"  - {error}")
        return EXIT_FAILURE

    for warning in outcome.validation.warnings:
        logger.warning(f"Review: {warning}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
