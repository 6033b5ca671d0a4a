"""
Byte-stream acquisition for CSV data.

Opens local files and HTTP resources and hands the reader a readable byte
stream plus, where the transport reports one, a detected text encoding.
"""
