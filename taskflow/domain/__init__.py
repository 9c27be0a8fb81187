"""
Domain packages: each holds schemas, a repository of queries, a service with
the business rules and a router exposing them.
"""
