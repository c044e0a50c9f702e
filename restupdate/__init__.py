"""One-shot update agent for a REST API service directory.

Fetches a ``.tar.gz`` package, checks its digest, unpacks it and swaps the
unpacked tree into the live service path, keeping one ``.bak`` generation.
"""

__version__ = "0.1.0"
