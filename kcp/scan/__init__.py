"""
Scanners that enrich the kcp state file from live clusters and services.
"""
