"""
Transactional email rendering and dispatch.
"""
