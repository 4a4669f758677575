"""HTTP surface for the analysis engine"""
