"""
Server services: dependencies, security, catalog read models and the order workflow.
"""
