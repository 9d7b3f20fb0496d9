"""
Folder uploader: walks a local directory tree and stores every file in an
Azure Blob Storage container, keeping the relative path as the blob name.

Files go up one at a time in walk order. Within a single file the storage
client splits the content into 1 MiB blocks and sends up to 16 of them in
parallel. The first failure stops the walk; blobs written before it stay in
the container.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Iterator, Optional

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    ResourceExistsError,
)
from azure.identity import (
    AzureCliCredential,
    AzurePowerShellCredential,
    ChainedTokenCredential,
    EnvironmentCredential,
    InteractiveBrowserCredential,
    ManagedIdentityCredential,
)
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings

from blob_folder_upload.config import Config, ConfigError

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
LOGGER_NAME = "blob_folder_upload"


def build_logger(log_dir: Optional[Path] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "upload.log", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(fh)

    return logger


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CredentialError(RuntimeError):
    """No identity source in the chain produced a storage token."""


class UploadError(RuntimeError):
    """A file could not be listed, read or uploaded."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"failed to upload {path}: {cause}")
        self.path = path
        self.cause = cause


# ---------------------------------------------------------------------------
# Azure clients
# ---------------------------------------------------------------------------

BLOCK_SIZE = 1024 * 1024  # 1 MiB
MAX_CONCURRENCY = 16
SERVICE_URL = "https://{account}.blob.core.windows.net/"
STORAGE_SCOPE = "https://storage.azure.com/.default"

# Tried in this order; the first source that yields a token wins.
IDENTITY_CHAIN = (
    EnvironmentCredential,
    ManagedIdentityCredential,
    AzureCliCredential,
    AzurePowerShellCredential,
    InteractiveBrowserCredential,
)


def build_credential() -> ChainedTokenCredential:
    credential = ChainedTokenCredential(*(source() for source in IDENTITY_CHAIN))
    try:
        credential.get_token(STORAGE_SCOPE)
    except ClientAuthenticationError as exc:
        raise CredentialError(f"failed to create credential: {exc}") from exc
    return credential


def create_service_client(cfg: Config) -> BlobServiceClient:
    """Connection string wins when both it and an account name are configured."""
    if cfg.uses_connection_string:
        try:
            return BlobServiceClient.from_connection_string(
                cfg.connection_string,
                max_block_size=BLOCK_SIZE,
                max_single_put_size=BLOCK_SIZE,
            )
        except ValueError as exc:
            raise ConfigError(f"failed to create blob client: {exc}") from exc

    credential = build_credential()
    return BlobServiceClient(
        account_url=SERVICE_URL.format(account=cfg.storage_account),
        credential=credential,
        max_block_size=BLOCK_SIZE,
        max_single_put_size=BLOCK_SIZE,
    )


def ensure_container(
    service_client: BlobServiceClient, container_name: str, logger: logging.Logger
) -> ContainerClient:
    container_client = service_client.get_container_client(container_name)
    try:
        container_client.create_container()
        logger.info(f"Created container '{container_name}'.")
    except ResourceExistsError:
        logger.info(f"Container '{container_name}' already exists.")
    except AzureError as exc:
        # e.g. 403 when the identity cannot create containers; upload may still work
        logger.warning(f"Container creation result (might already exist): {exc}")
    return container_client


# ---------------------------------------------------------------------------
# Directory helpers
# ---------------------------------------------------------------------------

def walk_files(
    root: str, logger: Optional[logging.Logger] = None
) -> Iterator[tuple[str, str]]:
    """Yield (path, path relative to root) for every non-directory entry.

    Depth first, in whatever order the filesystem lists entries. A root that
    is not a directory yields nothing. Symlinks to directories are not
    followed; they are reported at DEBUG level and skipped.
    """
    if not os.path.isdir(root):
        return

    def _raise(exc: OSError) -> None:
        raise UploadError(exc.filename or root, exc) from exc

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        if logger is not None:
            for name in dirnames:
                path = os.path.join(dirpath, name)
                if os.path.islink(path):
                    logger.debug(f"Skipped symlinked directory: {path}")
        for name in filenames:
            path = os.path.join(dirpath, name)
            yield path, os.path.relpath(path, root)


def make_blob_name(relative_path: str, sub_folder: str = "") -> str:
    """
    Compute the blob name for a relative file path, with optional prefix.

    Example:
        relative_path = sub\\report.csv
        sub_folder    = docs/
        result        = docs/sub/report.csv
    """
    blob = relative_path.replace("\\", "/")
    if sub_folder:
        blob = sub_folder.removesuffix("/") + "/" + blob
    return blob


def _guess_content_type(path: str) -> str:
    suffix = Path(path).suffix.lower()
    return {
        ".csv": "text/csv",
        ".json": "application/json",
        ".parquet": "application/octet-stream",
        ".zip": "application/zip",
        ".gz": "application/gzip",
        ".tar": "application/x-tar",
        ".txt": "text/plain",
        ".tsv": "text/tab-separated-values",
        ".html": "text/html",
        ".md": "text/markdown",
        ".pdf": "application/pdf",
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
    }.get(suffix, "application/octet-stream")


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

def upload_file(container_client: ContainerClient, file_path: str, blob_name: str) -> None:
    with open(file_path, "rb") as fh:
        container_client.upload_blob(
            name=blob_name,
            data=fh,
            overwrite=True,
            max_concurrency=MAX_CONCURRENCY,
            content_settings=ContentSettings(content_type=_guess_content_type(file_path)),
        )


def upload_folder(
    cfg: Config,
    logger: logging.Logger,
    service_client: Optional[BlobServiceClient] = None,
    dry_run: bool = False,
) -> int:
    """Upload every file under cfg.local_folder. Returns the number of files handled.

    Raises CredentialError if no identity is available and UploadError on the
    first file that cannot be listed or uploaded.
    """
    if dry_run:
        logger.info("[DRY RUN] Files that would be uploaded:")
        count = 0
        for path, relative in walk_files(cfg.local_folder, logger):
            logger.info(f"  {path}  ->  {make_blob_name(relative, cfg.sub_folder)}")
            count += 1
        logger.info("[DRY RUN] No files were uploaded.")
        return count

    if service_client is None:
        service_client = create_service_client(cfg)
    container_client = ensure_container(service_client, cfg.container_name, logger)

    uploaded = 0
    for path, relative in walk_files(cfg.local_folder, logger):
        blob_name = make_blob_name(relative, cfg.sub_folder)
        try:
            upload_file(container_client, path, blob_name)
        # ValueError covers names the SDK cannot encode (e.g. undecodable bytes)
        except (OSError, ValueError, AzureError) as exc:
            raise UploadError(path, exc) from exc
        logger.info(f"Uploaded: {path} -> {blob_name}")
        uploaded += 1

    logger.debug(f"{uploaded} file(s) uploaded to '{cfg.container_name}'")
    return uploaded
