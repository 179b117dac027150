"""
Layer 2: API model

Closed type IR (``apimodel.types``), the ``Api`` model (``apimodel.api``),
the canonical special-case tables (``apimodel.tables``), the type mapper,
the mangler and model assembly (``apimodel.assembly``).

Submodules are imported explicitly; the extractor reads ``apimodel.tables``
while ``apimodel.assembly`` builds on the extractor.
"""
