"""
The CSV data model, its parser and serializer.

Holds the Table matrix, the quoting rules shared by reading and writing, and
the reader/writer pair that move tables across byte streams.
"""
