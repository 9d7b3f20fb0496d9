"""
Upload a local directory tree to an Azure Blob Storage container.

Usage:
    python -m blob_folder_upload -container <name> -folder <path> [-account <name>]
                                 [-subfolder <prefix>] [-connection <conn-str>] [-dry-run]
"""

__version__ = "0.1.0"
