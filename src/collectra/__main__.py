"""Entry point for 'python -m collectra'."""

from collectra.cli import main

if __name__ == "__main__":
    main()
