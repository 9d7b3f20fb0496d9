"""Command-line entry point for blob-folder-upload."""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from blob_folder_upload.config import Config, ConfigError
from blob_folder_upload.uploader import (
    BLOCK_SIZE,
    MAX_CONCURRENCY,
    CredentialError,
    UploadError,
    build_logger,
    upload_folder,
)

USAGE = """\
Azure Blob Storage Folder Upload Tool
=====================================

Usage:
  blob-folder-upload [options]

Options:
  -account     Azure Storage Account name
  -container   Container name (required)
  -subfolder   Subfolder in container (optional)
  -folder      Local folder to upload (required)
  -connection  Azure Storage connection string (optional)
  -dry-run     List the blob names that would be written, upload nothing
  -help        Show this help message

  Each option may also be written with two dashes (--account, --folder, ...).

Environment Variables:
  AZURE_STORAGE_ACCOUNT           Storage account name
  AZURE_STORAGE_CONTAINER         Container name
  AZURE_STORAGE_SUBFOLDER         Subfolder in container
  LOCAL_FOLDER                    Local folder to upload
  AZURE_STORAGE_CONNECTION_STRING Connection string
  LOG_PATH                        Directory for upload.log (optional)

  Values may also be placed in a .env file in the working directory.

Examples:
  # Upload using command line arguments
  blob-folder-upload -account mystorageaccount -container mycontainer -folder ./data

  # Upload to a subfolder
  blob-folder-upload -account mystorageaccount -container mycontainer -subfolder documents -folder ./docs

  # Upload using environment variables
  export AZURE_STORAGE_ACCOUNT=mystorageaccount
  export AZURE_STORAGE_CONTAINER=mycontainer
  export LOCAL_FOLDER=./data
  blob-folder-upload

  # Upload using connection string
  blob-folder-upload -connection "DefaultEndpointsProtocol=https;AccountName=..." -container mycontainer -folder ./data

Authentication:
  Without a connection string the tool tries, in order:
  1. Environment variables (AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, AZURE_TENANT_ID)
  2. Managed Identity
  3. Azure CLI authentication
  4. Azure PowerShell authentication
  5. Interactive browser authentication

  Alternatively, you can use a connection string with -connection parameter.
"""


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    # Every flag answers to both -name and --name; no abbreviations.
    parser = argparse.ArgumentParser(
        prog="blob-folder-upload",
        description="Upload a local folder to an Azure Blob Storage container.",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "-account", "--account", dest="account", default="", help="Azure Storage Account name"
    )
    parser.add_argument(
        "-container", "--container", dest="container", default="", help="Container name"
    )
    parser.add_argument(
        "-subfolder",
        "--subfolder",
        dest="subfolder",
        default="",
        help="Subfolder in container (optional)",
    )
    parser.add_argument(
        "-folder", "--folder", dest="folder", default="", help="Local folder to upload"
    )
    parser.add_argument(
        "-connection",
        "--connection",
        dest="connection",
        default="",
        help="Azure Storage connection string (optional)",
    )
    parser.add_argument(
        "-dry-run",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="List files that would be uploaded, without uploading.",
    )
    parser.add_argument(
        "-help", "--help", "-h", dest="help", action="store_true", help="Show help"
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    if args.help:
        print(USAGE)
        return 0

    load_dotenv()
    cfg = Config(
        storage_account=args.account,
        container_name=args.container,
        sub_folder=args.subfolder,
        local_folder=args.folder,
        connection_string=args.connection,
    )

    # Validate everything before touching Azure
    try:
        cfg.validate()
    except ConfigError as exc:
        print(f"ERROR: Configuration error: {exc}", file=sys.stderr)
        return 1

    logger = build_logger(Path(cfg.log_path) if cfg.log_path else None)

    logger.info("=" * 60)
    logger.info("  Azure Blob Storage Folder Upload")
    logger.info("=" * 60)
    logger.info(f"Source    : {cfg.local_folder}")
    logger.info(f"Container : {cfg.container_name}")
    if cfg.sub_folder:
        logger.info(f"Prefix    : {cfg.sub_folder.removesuffix('/')}/")
    logger.info(f"Auth      : {'connection string' if cfg.uses_connection_string else 'identity chain'}")
    logger.info(f"Block     : {BLOCK_SIZE // (1024 * 1024)} MB  |  Threads: {MAX_CONCURRENCY}")

    try:
        count = upload_folder(cfg, logger, dry_run=args.dry_run)
    except (ConfigError, CredentialError, UploadError) as exc:
        logger.debug(f"Upload failed: {exc}")
        print(f"ERROR: Upload failed: {exc}", file=sys.stderr)
        return 1

    if args.dry_run:
        logger.info(f"{count} file(s) would be uploaded.")
        return 0

    logger.info(f"Summary: {count} file(s) uploaded")
    print(
        f"Successfully uploaded folder '{cfg.local_folder}' "
        f"to container '{cfg.container_name}'"
    )
    return 0
