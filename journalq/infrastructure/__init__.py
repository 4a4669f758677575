"""Settings, retry and rate limiting"""
