"""Validation, redaction and error sanitizing helpers"""
