"""
Input Guard App

This Django app strips injection-prone content from inbound request data
and keeps server-side requests away from internal network addresses (SSRF).
"""
