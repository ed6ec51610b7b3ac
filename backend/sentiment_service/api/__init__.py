"""API package - HTTP routes and request dependencies"""
