"""
Tests for Printable Tree Generation

This package contains tests for:
- Geometry, random source and crown envelope primitives
- Branch generation backends
- Foliage layout
- Mesh kernel session, assembly and STL export
- Assembly worker, topology analysis, specs and CLI
"""
