"""CLI interface for neocities-sync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .api import NeocitiesClient
from .exceptions import (
    NeocitiesAPIError,
    NeocitiesAuthenticationError,
    NeocitiesError,
    NeocitiesNetworkError,
)
from .models import Session
from .output import OutputFormatter
from .sync import (
    ApplyMode,
    SyncEngine,
    SyncResult,
    SyncStateManager,
    default_state_file,
)

logger = logging.getLogger(__name__)

RESULT_MESSAGES = {
    SyncResult.OK: "Synced.",
    SyncResult.OUT_OF_SYNC: (
        "Out of sync, this happened because your local state file contains "
        "file names which do not exist on neocities. To fix this, delete your "
        "state file and re-run neocities-sync."
    ),
    SyncResult.INVALID_FILE_TYPE: (
        "Invalid file type, use --ignore-disallowed-file-types to ignore."
    ),
    SyncResult.INVALID_AUTH: "Username or password is incorrect.",
    SyncResult.NETWORK_ERROR: "Network error.",
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("neocities_sync").setLevel(logging.DEBUG)
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
    else:
        # Set default logging level to WARNING to suppress debug/info messages
        logging.basicConfig(level=logging.WARNING)


@click.command()
@click.option(
    "--username",
    envvar="NEOCITIES_USERNAME",
    help="Neocities username.",
)
@click.option(
    "--password",
    envvar="NEOCITIES_PASSWORD",
    help="Neocities password.",
)
@click.option(
    "--api-key",
    envvar="NEOCITIES_API_KEY",
    help="Neocities API key, used instead of username and password.",
)
@click.option(
    "--path",
    "path",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Path to sync.",
)
@click.option(
    "--state",
    "state",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to state file. (default: <PATH>/.state)",
)
@click.option(
    "--ignore-disallowed-file-types",
    is_flag=True,
    default=False,
    help="Ignore disallowed file types.",
)
@click.option(
    "--apply-mode",
    type=click.Choice([mode.value for mode in ApplyMode], case_sensitive=False),
    default=ApplyMode.SAFE.value,
    show_default=True,
    help=(
        "safe: write the state file only after uploads and deletes succeeded. "
        "fast: write it concurrently with them."
    ),
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be done without doing it"
)
@click.option(
    "--reset-state",
    is_flag=True,
    help="Delete the state file first and rebuild it from the remote file list. "
    "With --dry-run the file is kept but the remote file list is still used.",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output the sync report in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(__version__, prog_name="neocities-sync")
@click.pass_context
def main(
    ctx: Any,
    username: Optional[str],
    password: Optional[str],
    api_key: Optional[str],
    path: Path,
    state: Optional[Path],
    ignore_disallowed_file_types: bool,
    apply_mode: str,
    dry_run: bool,
    reset_state: bool,
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """Sync files to neocities while doing the least amount of API requests.

    Every file below PATH is hashed and compared with the hashes recorded in
    the state file from the previous run. Only changed files are uploaded
    and files removed locally are deleted from the site. Without a state
    file the remote file list is used as the starting point.

    Examples:
        neocities-sync --username me --password secret --path ./public
        neocities-sync --username me --password secret --path . --dry-run
        NEOCITIES_API_KEY=... neocities-sync --path ./public
    """
    if api_key is None and (username is None or password is None):
        raise click.UsageError(
            "--username and --password are required unless --api-key is given"
        )

    _configure_logging(verbose)
    out = OutputFormatter(json_output=json, quiet=quiet or json)

    state_path = state if state is not None else default_state_file(path)

    if reset_state and not dry_run:
        if SyncStateManager().clear(state_path):
            out.info(f"Removed state file: {state_path}")

    with NeocitiesClient() as client:
        try:
            if api_key is not None:
                session = Session(api_key=api_key, username=username)
            else:
                session = client.login(username, password)
        except NeocitiesAuthenticationError:
            out.error(RESULT_MESSAGES[SyncResult.INVALID_AUTH])
            ctx.exit(1)
        except NeocitiesNetworkError as e:
            logger.debug(f"Login failed: {e}")
            out.error(RESULT_MESSAGES[SyncResult.NETWORK_ERROR])
            ctx.exit(1)
        except NeocitiesAPIError as e:
            out.error(f"API error: {e}")
            ctx.exit(1)

        engine = SyncEngine(client, out)
        try:
            report = engine.sync(
                session,
                path,
                state_path=state_path,
                ignore_disallowed_file_types=ignore_disallowed_file_types,
                apply_mode=ApplyMode.from_string(apply_mode),
                dry_run=dry_run,
                refresh_state=reset_state,
            )
        except KeyboardInterrupt:
            out.warning("\nSync cancelled by user")
            ctx.exit(130)
        except NeocitiesAPIError as e:
            out.error(f"API error: {e}")
            ctx.exit(1)
        except (NeocitiesError, ValueError) as e:
            out.error(f"Error: {e}")
            ctx.exit(1)

    if out.json_output:
        out.output_json(report.to_dict())

    message = RESULT_MESSAGES[report.result]
    if report.result == SyncResult.OK:
        if not dry_run:
            out.success(
                f"{message} uploaded {report.uploaded}, deleted {report.deleted}"
            )
    elif report.result == SyncResult.OUT_OF_SYNC:
        out.warning(message)
    else:
        out.error(message)

    ctx.exit(report.result.exit_code)


if __name__ == "__main__":
    main()
