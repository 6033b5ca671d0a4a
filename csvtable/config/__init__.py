"""
Configuration loading and validation for reader, writer and HTTP settings.

Provides strongly typed settings objects loaded from environment variables
(and an optional .env file) with upfront validation.
"""
