"""
DocExport package entry point.

Allows running docexport as a module:
    python -m docexport
"""

from docexport.cli import main

if __name__ == "__main__":
    main()
