"""specmodel -- an in-memory, versioned document model for API descriptions.

This package reads OpenAPI 2, OpenAPI 3 and AsyncAPI 2 documents into a
typed node tree, addresses any node with a portable path string, dispatches
visitors by ``(kind, dialect, major version)``, validates documents with a
configurable rule set plus asynchronous extension validators, and edits them
through reversible commands with undo/redo.

Typical workflow::

    from specmodel import library

    document = library.read_document_from_json_string(text)
    problems = library.validate(document)
    print(library.write_document_to_json_string(document))

Modules:
    core: Node tree, paths, visitor dispatch, reader and writer.
    validation: Rule engine and extension validators.
    commands: Reversible edits and the undo/redo stack.
    library: One-call entry points.
    parser: JSON/YAML text boundary and document-type detection.
    app: Typer CLI entry point.
    models: Pydantic models for problems, rule metadata and configuration.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
