"""Allow ``python -m freight_report``."""

from freight_report.cli import app

if __name__ == "__main__":
    app()
