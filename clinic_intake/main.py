"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or runs one spreadsheet import from the command line.
"""

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from clinic_intake.adapters import TabularParseError
from clinic_intake.bootstrap import bootstrap_create_application, bootstrap_create_import_session_factory
from clinic_intake.config import config_load_settings
from clinic_intake.jobs import ImportSessionState

LOGGER = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when an import is aborted.
    """

    argument_parser = argparse.ArgumentParser(description="Clinic intake runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "import-file"),
        help="Runtime command: `api` starts server, `import-file` imports one CSV file",
        type=str,
    )
    argument_parser.add_argument("path", nargs="?", type=str, help="CSV file path for `import-file`")
    argument_parser.add_argument("--owner-id", dest="owner_id", type=str, help="Owner id stamped on imported records")
    argument_parser.add_argument(
        "--map",
        dest="mappings",
        action="append",
        default=[],
        metavar="TARGET=HEADER",
        help="Mapping selection, repeatable; repeat one aggregate target to add several headers",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if parsed_arguments.command == "import-file":
        if not parsed_arguments.path or not parsed_arguments.owner_id:
            argument_parser.error("import-file requires a path and --owner-id")
        exit_code = main_run_import_file(
            path=Path(parsed_arguments.path),
            owner_id=parsed_arguments.owner_id,
            mappings=parsed_arguments.mappings,
        )
        if exit_code != 0:
            raise SystemExit(exit_code)
        return

    application = bootstrap_create_application()
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_run_import_file(path: Path, owner_id: str, mappings: list[str]) -> int:
    """Import one CSV file and print its report as JSON.

    Args:
        path: CSV file path.
        owner_id: Owner id stamped on imported records.
        mappings: `target=header` selections in application order.

    Returns:
        int: Process exit code; 0 when committed, 1 otherwise.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        OSError: Raised when the file cannot be read.
    """

    session = bootstrap_create_import_session_factory()(owner_id)
    try:
        session.job_ingest_payload(path.read_bytes())
    except TabularParseError:
        print(json.dumps(session.report.job_report_as_payload(), ensure_ascii=False, indent=2))
        return 1

    for selection in mappings:
        target_key, separator, header = selection.partition("=")
        if not separator:
            LOGGER.error("invalid mapping selection %s; expected TARGET=HEADER", selection)
            return 1
        try:
            session.job_set_mapping(target_key.strip(), header.strip())
        except ValueError as error:
            LOGGER.error("invalid mapping selection %s: %s", selection, error)
            return 1

    if not session.job_is_required_satisfied():
        LOGGER.warning(
            "required fields are not mapped: %s",
            ", ".join(session.column_mapper.mapping_missing_required_keys()),
        )

    report = session.job_commit()
    print(json.dumps(report.job_report_as_payload(), ensure_ascii=False, indent=2))
    return 0 if report.status == ImportSessionState.COMMITTED.value else 1


if __name__ == "__main__":
    main()
