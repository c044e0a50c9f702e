"""Adapter package for external I/O implementations.

Purpose:
    Collect the concrete HTTP and filesystem implementations that the update
    use cases drive: streaming downloads, tar extraction and the live
    service directory swap.

Dependencies:
    ``http_client`` depends on ``requests``; the other modules only use the
    standard library filesystem APIs.
"""
