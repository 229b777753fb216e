"""
Modai - Main Entry Point
"""
from modai.cli import main


if __name__ == "__main__":
    main()
