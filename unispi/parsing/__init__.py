"""
This package contains the modules that parse and decode traffic exchanged
between managed devices and their controller.

Sub-packages handle specific data formats:

- ``inform``: The ``TNBU`` inform packet codec (header, crypto, compression, JSON).
"""
