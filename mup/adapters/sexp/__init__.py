"""Symbolic-expression codec for the mu server protocol.

- decoder.py: text <-> raw structures (backed by sexpdata)
- canonical.py: raw structures -> canonical Python values
"""

from mup.adapters.sexp.canonical import delispify, hashify, lispify
from mup.adapters.sexp.decoder import decode, encode

__all__ = ["decode", "delispify", "encode", "hashify", "lispify"]
