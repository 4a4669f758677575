"""Gemini adapter, prompts and the enrichment client"""
