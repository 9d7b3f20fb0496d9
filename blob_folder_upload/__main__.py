import sys

from blob_folder_upload.cli import main

if __name__ == "__main__":
    sys.exit(main())
