"""Backend package: report parsers, upload API and runtime helpers."""
