"""
Deployment Scripts
Command line entry points for deploying and pre-flight checks
"""
