"""
csvtable - tabular data in comma-separated-values text.

Models a rectangular data set with optional column titles, parses it from byte
streams (files, HTTP responses) and serializes it back out.
"""
