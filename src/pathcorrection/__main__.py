"""Command-line interface."""
from pathcorrection.main import main

if __name__ == "__main__":
    main()
