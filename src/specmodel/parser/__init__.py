"""Text boundary and document-type detection.

Typical usage::

    from specmodel.parser import detect_document_type, load_spec

    raw = load_spec("petstore.yaml")
    document_type = detect_document_type(raw)

Sub-modules:

* :mod:`~specmodel.parser.loader` -- I/O (file, URL, stdin) plus JSON/YAML
  parsing and rendering.
* :mod:`~specmodel.parser.detect` -- infer dialect and major version from
  the version marker.
"""

from specmodel.parser.detect import detect_document_type
from specmodel.parser.loader import load_spec, parse_content, stringify

__all__ = ["detect_document_type", "load_spec", "parse_content", "stringify"]
