"""Simplate - YAML-driven template renderer with multi-file output.

Renders Jinja2 templates against YAML data and routes `#FILE:name#`
blocks to individual files.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .pipeline import ExecutionResult, execute, execute_with_files

__all__ = ["ExecutionResult", "execute", "execute_with_files", "__version__"]
