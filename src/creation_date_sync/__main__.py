"""Allow running as `python -m creation_date_sync`."""

from creation_date_sync.cli.main import main

if __name__ == "__main__":
    main()
