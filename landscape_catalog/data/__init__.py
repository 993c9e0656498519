"""
Snapshot storage, refresh orchestration and parsing of the landscape document.

This package is responsible for:
* Turning the raw landscape JSON document into validated catalog entries.
* Holding the current snapshot behind an atomically swapped reference.
* Running fetch -> fingerprint -> parse -> publish refresh cycles.
"""
