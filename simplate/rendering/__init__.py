"""Template parsing, rendering and output sinks."""
